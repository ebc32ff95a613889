"""仓库地址解析

支持的形式:
  - https://host/owner/repo.git   (http / https / git / ssh / git+ssh)
  - file:///abs/path/repo
  - user@host:owner/repo.git      (scp 简写，先改写为 ssh://user@host/owner/repo.git)

解析结果的 cache_key = host[:port]/path，作为本地缓存目录的相对路径；
端口不同即视为不同仓库，各自一份检出。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from gitdeps.core.exceptions import LocatorInvalidError

SUPPORTED_SCHEMES = frozenset(("http", "https", "git", "ssh", "git+ssh", "file"))

_SCP_RE = re.compile(r"^([A-Za-z0-9_.-]+)@([A-Za-z0-9._-]+):(?!//)(.+)$")
_SHORTHAND_RE = re.compile(r"^[\w.-]+/[\w.-]+$")


@dataclass(frozen=True)
class RepoLocator:
    """解析后的仓库地址"""

    raw: str
    scheme: str
    host: str
    path: str  # 不含首尾 "/"
    user: str = ""
    port: int | None = None

    @property
    def netloc(self) -> str:
        return f"{self.host}:{self.port}" if self.port is not None else self.host

    @property
    def cache_key(self) -> str:
        return "/".join(part for part in (self.netloc, self.path) if part)

    @property
    def url(self) -> str:
        """规范化后的 URL（scp 简写被展开为 ssh://）"""
        auth = f"{self.user}@" if self.user else ""
        return f"{self.scheme}://{auth}{self.netloc}/{self.path}"


def parse_locator(text: object) -> RepoLocator:
    """解析仓库地址

    Raises:
        LocatorInvalidError: 为空、协议不支持、缺少主机或路径、路径含 ".."
    """
    if not isinstance(text, str) or not text.strip():
        raise LocatorInvalidError(f"仓库地址为空: {text!r}")
    raw = text.strip()

    m = _SCP_RE.match(raw)
    normalized = f"ssh://{m.group(1)}@{m.group(2)}/{m.group(3)}" if m else raw

    parts = urlsplit(normalized)
    scheme = parts.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise LocatorInvalidError(
            f"不支持的仓库地址协议 '{scheme or '(无)'}': {raw}"
        )

    try:
        host = (parts.hostname or "").lower()
        user = parts.username or ""
        port = parts.port
    except ValueError as e:
        raise LocatorInvalidError(f"仓库地址无法解析: {raw} ({e})") from e
    if scheme != "file" and not host:
        raise LocatorInvalidError(f"仓库地址缺少主机名: {raw}")

    path = parts.path.strip("/")
    if not path:
        raise LocatorInvalidError(f"仓库地址缺少仓库路径: {raw}")
    if ".." in path.split("/"):
        raise LocatorInvalidError(f"仓库路径不允许包含 '..': {raw}")

    return RepoLocator(raw=raw, scheme=scheme, host=host, path=path, user=user, port=port)


def expand_shorthand(text: str, default_host: str = "github.com") -> str:
    """owner/repo 简写展开为 https://<default_host>/owner/repo.git，其他形式原样返回"""
    candidate = text.strip()
    if not _SHORTHAND_RE.match(candidate):
        return candidate
    if not candidate.endswith(".git"):
        candidate += ".git"
    return f"https://{default_host}/{candidate}"
