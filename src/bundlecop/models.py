"""Data models for file readings, submissions and build provenance."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class FileSpec:
    """A file to be measured, and the root folder it was found under."""
    root: str
    filename: str


@dataclass
class FileReading:
    """A measured file."""
    filename: str
    name: str  # The stable name, without hash, that we use as an id
    root: str
    hash: str
    raw_size: Optional[int]
    gzip_size: Optional[int]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the format expected by the API."""
        return {
            'filename': self.filename,
            'name': self.name,
            'root': self.root,
            'hash': self.hash,
            'rawSize': self.raw_size,
            'gzipSize': self.gzip_size,
        }


@dataclass
class Reading:
    """A set of file readings for one bundleset at one commit."""
    files: List[FileReading]
    bundleset: str
    commit: Optional[str] = None
    commit_message: Optional[str] = None
    branch: Optional[str] = None
    # Either a flag, or the name of the base branch if we know it
    is_feature_branch: Optional[Union[bool, str]] = None
    parent_commits: Optional[List[str]] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for submission; unset optional values are left out."""
        payload: Dict[str, Any] = {
            'files': [f.to_dict() for f in self.files],
            'bundleset': self.bundleset,
        }
        optional = {
            'commit': self.commit,
            'commitMessage': self.commit_message,
            'branch': self.branch,
            'isFeatureBranch': self.is_feature_branch,
            'parentCommits': self.parent_commits,
        }
        for key, value in optional.items():
            if value is None or value == "":
                continue
            payload[key] = value
        return payload


@dataclass
class CIInfo:
    """Build information read from a CI environment."""
    id: str
    name: str
    commit_id: Optional[str] = None
    commit_message: Optional[str] = None
    tag: Optional[str] = None
    branch: Optional[str] = None
    event: Optional[str] = None  # "push" or "pull_request"
    base_branch: Optional[str] = None
    # For every field above, the env variable (or reasoning) it came from
    sources: Dict[str, Optional[str]] = field(default_factory=dict)


@dataclass
class RepoInfo:
    """Information read from a source control checkout."""
    system: str
    commit_id: str
    path: str
    commit_message: Optional[str] = None
    branch: Optional[str] = None
    tag: Optional[str] = None
    parent_commit_ids: Optional[List[str]] = None

    def __str__(self) -> str:
        short = self.commit_id[:8]
        if self.branch:
            return f"{self.system}: {self.branch} ({short})"
        return f"{self.system}: {short}"


@dataclass
class SubmissionOptions:
    """Options for a submission, as given by a user or read from the environment."""
    project_key: Optional[str] = None
    api_url: Optional[str] = None
    bundle_set: Optional[str] = None
    commit: Optional[str] = None
    commit_message: Optional[str] = None
    parent_commits: Optional[List[str]] = None
    branch: Optional[str] = None
    base_branch: Optional[str] = None
    is_feature_branch: Optional[bool] = None
    only_if_env: Optional[str] = None
