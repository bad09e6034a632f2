"""Request, result and context structures for a single provisioning run."""

import base64
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, Mapping

from .errors import ErrorResponse, TransportError, error_handler


@dataclass(frozen=True)
class Distribution:
    """Metadata of the project being scaffolded, exposed to name templates as ``dist``."""
    name: str
    version: Optional[str] = None
    abstract: Optional[str] = None


@dataclass(frozen=True)
class ScaffoldContext:
    """Payload handed over by the scaffolding host after a project is minted."""
    mint_root: Path
    repo: Optional[str] = None
    descr: Optional[str] = None

    @classmethod
    def from_mapping(cls, opts: Mapping[str, Any]) -> "ScaffoldContext":
        """Build a context from the host's ``{mint_root, repo, descr}`` dict."""
        return cls(
            mint_root=Path(opts["mint_root"]),
            repo=opts.get("repo") or None,
            descr=opts.get("descr") or None,
        )


@dataclass(frozen=True)
class Credentials:
    """Login and optional secret for the hosting service."""
    login: str
    secret: Optional[str] = None

    def authorization_header(self) -> Optional[str]:
        """HTTP Basic value for ``login:secret``, or None without a secret."""
        if not self.secret:
            return None
        token = base64.b64encode(f"{self.login}:{self.secret}".encode("utf-8")).decode("ascii")
        return f"Basic {token}"

    def __repr__(self) -> str:
        masked = "***" if self.secret else None
        return f"Credentials(login={self.login!r}, secret={masked!r})"


@dataclass(frozen=True)
class ProvisionRequest:
    """Parameters of the repository-creation call."""
    repository_name: str
    is_public: bool = True
    description: Optional[str] = None
    issues_enabled: bool = True
    wiki_enabled: bool = True
    downloads_enabled: bool = True

    def to_payload(self) -> Dict[str, Any]:
        """JSON body expected by ``POST /user/repos``."""
        payload: Dict[str, Any] = {
            "name": self.repository_name,
            "public": self.is_public,
        }
        if self.description:
            payload["description"] = self.description
        payload["has_issues"] = self.issues_enabled
        payload["has_wiki"] = self.wiki_enabled
        payload["has_downloads"] = self.downloads_enabled
        return payload


@dataclass(frozen=True)
class ProvisionResult:
    """The part of the creation response the local wiring needs."""
    ssh_clone_url: str
    html_url: Optional[str] = None
    full_name: Optional[str] = None

    @classmethod
    def from_response(cls, body: Any) -> "ProvisionResult":
        """Parse a decoded JSON response body."""
        if not isinstance(body, dict) or not body.get("ssh_url"):
            raise TransportError(
                "Malformed response from GitHub: missing 'ssh_url'",
                error_code="MALFORMED_RESPONSE"
            )
        return cls(
            ssh_clone_url=body["ssh_url"],
            html_url=body.get("html_url"),
            full_name=body.get("full_name"),
        )


@dataclass
class LocalWiringResult:
    """What the local git step did, or why it did nothing."""
    remote_name: str
    remote_added: bool = False
    branch: Optional[str] = None
    tracking_configured: bool = False
    skipped_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "remote_name": self.remote_name,
            "remote_added": self.remote_added,
            "branch": self.branch,
            "tracking_configured": self.tracking_configured,
            "skipped_reason": self.skipped_reason,
        }


@dataclass
class ProvisionOutcome:
    """Result of one ``after_mint`` invocation."""
    success: bool
    message: str
    operation: str
    repository_name: Optional[str] = None
    ssh_url: Optional[str] = None
    error_code: Optional[str] = None
    local_wiring: Optional[LocalWiringResult] = None
    error: Optional[ErrorResponse] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Structured form returned by the MCP tool."""
        if not self.success:
            if self.error is not None:
                result = self.error.to_dict()
            else:
                result = {"error_code": self.error_code, "message": self.message}
            result["success"] = False
            result["operation"] = self.operation
            if self.ssh_url:
                result["ssh_url"] = self.ssh_url
            return result

        data: Dict[str, Any] = {"message": self.message}
        if self.repository_name:
            data["repository"] = self.repository_name
        if self.ssh_url:
            data["ssh_url"] = self.ssh_url
        if self.local_wiring is not None:
            data["local_wiring"] = self.local_wiring.to_dict()
        return error_handler.create_success_response(self.operation, data)
