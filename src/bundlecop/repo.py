"""Read build information from source control."""

from typing import Optional

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from .models import RepoInfo


def get_repo_info(path: str = ".") -> Optional[RepoInfo]:
    """Get commit information from the git repository at ``path``.

    Parent directories are searched for the repository root.

    Args:
        path (str): Any path inside the working tree.

    Returns:
        Optional[RepoInfo]: Repository information, or None if ``path`` is
            not in a git repository, or the repository has no commits.
    """
    try:
        repo = Repo(path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return None

    try:
        commit = repo.head.commit
    except ValueError:
        # HEAD points to a branch without any commits yet
        return None

    if repo.head.is_detached:
        branch = None
    else:
        branch = repo.active_branch.name

    tag = None
    for tag_ref in repo.tags:
        if tag_ref.commit == commit:
            tag = tag_ref.name
            break

    parents = [parent.hexsha for parent in commit.parents]

    return RepoInfo(
        system="git",
        commit_id=commit.hexsha,
        commit_message=commit.message.strip(),
        branch=branch,
        tag=tag,
        parent_commit_ids=parents or None,
        path=repo.working_tree_dir or path,
    )
