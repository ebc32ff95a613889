"""gitdeps - 以 Git 仓库地址为依赖源的清单解析与锁定工具"""

__version__ = "0.3.0"
