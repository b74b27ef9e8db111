"""Tests for reading build information from CI environments."""

import pytest

from bundlecop.ci import check_presence, get_ci_info, resolve_env_source


class TestCheckPresence:

    def test_matching_mapping(self, monkeypatch):
        monkeypatch.delenv('FOO', raising=False)
        monkeypatch.delenv('BAR', raising=False)
        assert check_presence({'FOO': 'foo', 'BAR': 'bar'}) is False

        monkeypatch.setenv('FOO', 'foo')
        monkeypatch.setenv('BAR', 'bar')
        assert check_presence({'FOO': 'foo', 'BAR': 'bar'}) is True

    def test_mapping_requires_exact_values(self):
        env = {'FOO': 'foo', 'BAR': 'baz'}
        assert check_presence({'FOO': 'foo', 'BAR': 'bar'}, env) is False

    def test_single_variable(self, monkeypatch):
        monkeypatch.delenv('FOOBARCHIZ', raising=False)
        assert check_presence("FOOBARCHIZ") is False

        monkeypatch.setenv('FOOBARCHIZ', 'true')
        assert check_presence("FOOBARCHIZ") is True

    def test_empty_variable_is_not_present(self):
        assert check_presence("FOOBARCHIZ", {'FOOBARCHIZ': ''}) is False


class TestResolveEnvSource:

    def test_no_source(self):
        assert resolve_env_source(None, {'A': '1'}) == (None, None)

    def test_string(self):
        assert resolve_env_source('A', {'A': '1'}) == ('1', 'A')
        assert resolve_env_source('A', {}) == (None, 'A')

    def test_list_uses_first_set_variable(self):
        env = {'A': '', 'B': '2', 'C': '3'}
        assert resolve_env_source(['A', 'B', 'C'], env) == ('2', 'B')
        assert resolve_env_source(['X', 'Y'], env) == (None, None)

    def test_callable(self):
        env = {'A': '1'}
        assert resolve_env_source(lambda env, resolve: resolve('A'), env) == ('1', 'A')
        assert resolve_env_source(lambda env, resolve: None, env) == (None, None)

    def test_invalid_source(self):
        with pytest.raises(TypeError):
            resolve_env_source(42, {})


class TestGetCIInfo:

    def test_no_ci(self):
        assert get_ci_info({}) is None

    def test_travis_pull_request(self):
        info = get_ci_info({
            'TRAVIS': 'true',
            'TRAVIS_EVENT_TYPE': 'pull_request',
            'TRAVIS_PULL_REQUEST_BRANCH': 'feature',
            'TRAVIS_BRANCH': 'master',
            'TRAVIS_PULL_REQUEST_SHA': 'abc123',
            'TRAVIS_COMMIT': 'def456',
            'TRAVIS_COMMIT_MESSAGE': 'Fix things',
        })

        assert info.id == 'travis'
        assert info.commit_id == 'abc123'
        assert info.sources['commit_id'] == 'TRAVIS_PULL_REQUEST_SHA'
        assert info.branch == 'feature'
        assert info.base_branch == 'master'
        assert info.event == 'pull_request'
        assert info.commit_message == 'Fix things'

    def test_travis_push(self):
        info = get_ci_info({
            'TRAVIS': 'true',
            'TRAVIS_EVENT_TYPE': 'push',
            'TRAVIS_BRANCH': 'master',
            'TRAVIS_COMMIT': 'def456',
        })

        assert info.branch == 'master'
        assert info.base_branch is None
        assert info.event == 'push'
        assert info.commit_id == 'def456'

    def test_gitlab_tag_is_not_a_branch(self):
        info = get_ci_info({
            'GITLAB_CI': 'true',
            'CI_COMMIT_SHA': 'abc',
            'CI_COMMIT_REF_NAME': 'v1.0',
            'CI_COMMIT_TAG': 'v1.0',
        })

        assert info.id == 'gitlab'
        assert info.branch is None
        assert info.tag == 'v1.0'

    def test_gitlab_branch(self):
        info = get_ci_info({
            'GITLAB_CI': 'true',
            'CI_COMMIT_SHA': 'abc',
            'CI_COMMIT_REF_NAME': 'main',
        })
        assert info.branch == 'main'
        assert info.sources['branch'] == 'CI_COMMIT_REF_NAME'

    def test_codeship_presence_by_value(self):
        assert get_ci_info({'CI_NAME': 'other'}) is None

        info = get_ci_info({'CI_NAME': 'codeship', 'CI_BRANCH': 'main', 'CI_COMMIT_ID': 'abc'})
        assert info.id == 'codeship'
        assert info.event == 'push'
        assert info.sources['event'] == 'missing CI_PULL_REQUEST'

    def test_appveyor_pull_request(self):
        info = get_ci_info({
            'APPVEYOR': 'True',
            'APPVEYOR_REPO_BRANCH': 'master',
            'APPVEYOR_PULL_REQUEST_NUMBER': '12',
            'APPVEYOR_REPO_COMMIT': 'abc',
        })

        assert info.branch is None
        assert info.base_branch == 'master'
        assert info.event == 'pull_request'

    def test_drone_tag_build_has_no_event(self):
        info = get_ci_info({
            'DRONE': 'true',
            'DRONE_COMMIT_SHA': 'abc',
            'DRONE_COMMIT_REF': 'refs/tags/v1.0',
            'DRONE_COMMIT_BRANCH': 'master',
            'DRONE_BUILD_EVENT': 'tag',
        })

        assert info.tag == 'refs/tags/v1.0'
        assert info.event is None

    def test_first_provider_wins(self):
        info = get_ci_info({'CIRCLECI': 'true', 'TRAVIS': 'true', 'CIRCLE_SHA1': 'abc'})
        assert info.id == 'circleci'
        assert info.name == 'CircleCi'
        assert info.commit_id == 'abc'
