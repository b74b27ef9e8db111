"""Read build information from a CI environment.

Every supported CI provider is described by a static table entry: how to
detect that we run on it, and which environment variables hold the commit,
branch and so on.

An env source can be:
- None: the provider does not offer this information
- a string: read that environment variable
- a list of strings: the first of these variables that is set
- a callable ``(env, resolve) -> (value, source) | None`` for custom logic,
  where ``resolve`` resolves another env source against the same env
"""

import os
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from .models import CIInfo


EnvSourceResult = Tuple[Optional[Any], Optional[str]]
EnvSource = Union[None, str, List[str], Callable[..., Optional[EnvSourceResult]]]
PresenceSource = Union[EnvSource, Dict[str, str]]


@dataclass(frozen=True)
class CIProvider:
    """Where a CI system keeps its build details in the environment."""
    id: str
    name: str
    presence: PresenceSource
    branch: EnvSource = None
    tag: EnvSource = None
    commit_id: EnvSource = None
    commit_message: EnvSource = None
    # Is this a regular push build, or a pull request?
    event: EnvSource = None
    # The branch to merge into in case of a pull request
    base_branch: EnvSource = None


def _pull_request_event(variable: str) -> Callable[..., EnvSourceResult]:
    def event(env, resolve):
        if env.get(variable):
            return 'pull_request', variable
        return 'push', f'missing {variable}'
    return event


def _travis_event(env, resolve):
    if env.get('TRAVIS_EVENT_TYPE') == 'pull_request':
        return resolve('TRAVIS_EVENT_TYPE')
    return 'push', 'TRAVIS_EVENT_TYPE'


def _travis_base_branch(env, resolve):
    # TRAVIS_BRANCH is the base branch, but only for a pull request
    if env.get('TRAVIS_PULL_REQUEST_BRANCH'):
        return resolve('TRAVIS_BRANCH')
    return None


def _gitlab_branch(env, resolve):
    # CI_COMMIT_REF_NAME may be a tag
    if env.get('CI_COMMIT_REF_NAME') != env.get('CI_COMMIT_TAG'):
        return resolve('CI_COMMIT_REF_NAME')
    return None


def _drone_tag(env, resolve):
    if env.get('DRONE_COMMIT_REF') != env.get('DRONE_COMMIT_BRANCH'):
        return resolve('DRONE_COMMIT_REF')
    return None


def _drone_event(env, resolve):
    # Can be push, pull_request or tag
    if env.get('DRONE_BUILD_EVENT') == 'tag':
        return None
    return resolve('DRONE_BUILD_EVENT')


def _appveyor_branch(env, resolve):
    # For pull requests APPVEYOR_REPO_BRANCH is the base branch, and there
    # is no other branch variable.
    if env.get('APPVEYOR_PULL_REQUEST_NUMBER'):
        return None
    return resolve('APPVEYOR_REPO_BRANCH')


def _appveyor_base_branch(env, resolve):
    if env.get('APPVEYOR_PULL_REQUEST_NUMBER'):
        return resolve('APPVEYOR_REPO_BRANCH')
    return None


# https://circleci.com/docs/1.0/environment-variables/
CIRCLECI = CIProvider(
    id='circleci',
    name='CircleCi',
    presence=['CIRCLECI'],
    branch='CIRCLE_BRANCH',
    tag='CIRCLE_TAG',
    commit_id='CIRCLE_SHA1',
    event=_pull_request_event('CI_PULL_REQUEST'),
)

# https://docs.travis-ci.com/user/environment-variables/
TRAVIS = CIProvider(
    id='travis',
    name='Travis',
    presence='TRAVIS',
    event=_travis_event,
    tag='TRAVIS_TAG',
    commit_id=['TRAVIS_PULL_REQUEST_SHA', 'TRAVIS_COMMIT'],
    commit_message='TRAVIS_COMMIT_MESSAGE',
    # For a pull request, TRAVIS_BRANCH contains the base branch
    branch=['TRAVIS_PULL_REQUEST_BRANCH', 'TRAVIS_BRANCH'],
    base_branch=_travis_base_branch,
)

# https://wiki.jenkins.io/display/JENKINS/Building+a+software+project
JENKINS = CIProvider(
    id='jenkins',
    name='Jenkins',
    presence='JENKINS_URL',
    branch=['GIT_BRANCH', 'CVS_BRANCH'],
    commit_id=['GIT_COMMIT', 'SVN_REVISION'],
)

# https://docs.gitlab.com/ee/ci/variables/
GITLAB = CIProvider(
    id='gitlab',
    name='Gitlab CI',
    presence='GITLAB_CI',
    commit_id='CI_COMMIT_SHA',
    tag='CI_COMMIT_TAG',
    branch=_gitlab_branch,
)

# https://documentation.codeship.com/basic/builds-and-configuration/set-environment-variables/
CODESHIP = CIProvider(
    id='codeship',
    name='Codeship',
    presence={'CI_NAME': 'codeship'},
    commit_id='CI_COMMIT_ID',
    commit_message='CI_MESSAGE',
    branch='CI_BRANCH',
    event=_pull_request_event('CI_PULL_REQUEST'),
)

# http://readme.drone.io/0.5/usage/environment-reference/
DRONE = CIProvider(
    id='drone',
    name='Drone CI',
    presence='DRONE',
    commit_id='DRONE_COMMIT_SHA',
    commit_message='DRONE_COMMIT_MESSAGE',
    tag=_drone_tag,
    branch='DRONE_COMMIT_BRANCH',
    event=_drone_event,
)

# https://www.appveyor.com/docs/environment-variables/
APPVEYOR = CIProvider(
    id='appveyor',
    name='Appveyor',
    presence='APPVEYOR',
    commit_id='APPVEYOR_REPO_COMMIT',
    commit_message='APPVEYOR_REPO_COMMIT_MESSAGE',
    tag='APPVEYOR_REPO_TAG_NAME',
    branch=_appveyor_branch,
    base_branch=_appveyor_base_branch,
    event=_pull_request_event('APPVEYOR_PULL_REQUEST_NUMBER'),
)

PROVIDERS: List[CIProvider] = [
    CIRCLECI,
    TRAVIS,
    JENKINS,
    APPVEYOR,
    DRONE,
    CODESHIP,
    GITLAB,
]

CI_FIELDS = ('commit_id', 'commit_message', 'tag', 'branch', 'event', 'base_branch')


def resolve_env_source(source: EnvSource, env: Optional[Mapping[str, str]] = None) -> EnvSourceResult:
    """Resolve an env source.

    Returns:
        Tuple: The value and the env variable it was read from, or
            ``(None, None)`` if nothing was found.

    Raises:
        TypeError: If ``source`` is not a supported env source.
    """
    if env is None:
        env = os.environ

    if source is None or source is False:
        return None, None

    if isinstance(source, str):
        return env.get(source) or None, source

    if isinstance(source, (list, tuple)):
        for variable in source:
            if env.get(variable):
                return env[variable], variable
        return None, None

    if callable(source):
        result = source(env, partial(resolve_env_source, env=env))
        if not result:
            return None, None
        return result

    raise TypeError(f"Invalid env source: {source!r}")


def check_presence(presence: PresenceSource, env: Optional[Mapping[str, str]] = None) -> bool:
    """Check whether a CI is present, according to its presence rule.

    A mapping requires all variables to have exactly the given values; any
    other env source must resolve to a non-empty value.
    """
    if env is None:
        env = os.environ

    if isinstance(presence, Mapping):
        return all(env.get(key) == value for key, value in presence.items())

    value, _ = resolve_env_source(presence, env)
    return bool(value)


def get_ci_info(env: Optional[Mapping[str, str]] = None) -> Optional[CIInfo]:
    """Figure out which CI we run on, and read what it tells us.

    Returns:
        Optional[CIInfo]: Information of the first detected CI, or None.
    """
    if env is None:
        env = os.environ

    for provider in PROVIDERS:
        if not check_presence(provider.presence, env):
            continue

        values = {}
        sources = {}
        for field_name in CI_FIELDS:
            value, source = resolve_env_source(getattr(provider, field_name), env)
            values[field_name] = value
            sources[field_name] = source

        return CIInfo(id=provider.id, name=provider.name, sources=sources, **values)

    return None
