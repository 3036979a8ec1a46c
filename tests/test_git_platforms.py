"""Unit tests for release_cleanup/git_platforms.py"""

import pytest

from conftest import make_response, next_link
from release_cleanup.git_platforms import GitHubClient, GitLabClient, GitPlatformClient
from release_cleanup.models import Release, Tag

GH = "https://api.github.com"
GL = "https://gitlab.com/api/v4"


def answer(routes):
    def handler(method, url, **kwargs):
        return routes[(method, url)]
    return handler


class TestGitPlatformClient:
    """Tests for the GitPlatformClient base class"""

    def test_cannot_be_instantiated(self, http):
        with pytest.raises(TypeError):
            GitPlatformClient(GH, {}, http=http)


class TestGitHubClient:
    """Tests for GitHubClient"""

    def test_fetch_items_follows_pagination(self, http):
        page2 = f"{GH}/repos/octo/tool/releases?page=2"
        http.request.side_effect = answer({
            ("GET", f"{GH}/repos/octo/tool/releases"): make_response(
                [{"id": 1, "tag_name": "v1", "name": "First"}], links=next_link(page2)
            ),
            ("GET", page2): make_response([{"id": 2, "tag_name": "v2", "name": None}]),
            ("GET", f"{GH}/repos/octo/tool/tags"): make_response([{"name": "v1"}, {"name": "v2"}]),
        })

        releases, tags = GitHubClient("tok", "octo", "tool", http=http).fetch_items()

        assert releases == [Release("v1", "First", 1), Release("v2", None, 2)]
        assert tags == [Tag("v1"), Tag("v2")]
        assert http.headers["Authorization"] == "Bearer tok"

    def test_deletes_releases_by_id_and_tags_by_ref(self, http):
        http.request.side_effect = answer({
            ("DELETE", f"{GH}/repos/octo/tool/releases/1"): make_response(None, 204),
            ("DELETE", f"{GH}/repos/octo/tool/git/refs/tags/v1"): make_response(None, 204),
        })

        result = GitHubClient("tok", "octo", "tool", http=http).delete_items([Release("v1", id=1)], [Tag("v1")])

        assert result == (2, 0)

    def test_failed_item_does_not_stop_the_rest(self, http):
        http.request.side_effect = answer({
            ("DELETE", f"{GH}/repos/octo/tool/releases/1"): make_response({"message": "Not Found"}, 404),
            ("DELETE", f"{GH}/repos/octo/tool/releases/2"): make_response(None, 204),
            ("DELETE", f"{GH}/repos/octo/tool/git/refs/tags/v2"): make_response(None, 204),
        })

        result = GitHubClient("tok", "octo", "tool", http=http).delete_items(
            [Release("v1", id=1), Release("v2", id=2)], [Tag("v2")]
        )

        assert result == (2, 1)


class TestGitLabClient:
    """Tests for GitLabClient"""

    PROJECT = f"{GL}/projects/group%2Ftool"

    def test_fetch_items(self, http):
        http.request.side_effect = answer({
            ("GET", f"{self.PROJECT}/releases"): make_response([{"tag_name": "v1", "name": "One"}]),
            ("GET", f"{self.PROJECT}/repository/tags"): make_response([{"name": "v1"}]),
        })

        releases, tags = GitLabClient("glpat", "group/tool", http=http).fetch_items()

        assert releases == [Release("v1", "One")]
        assert tags == [Tag("v1")]
        assert http.headers["PRIVATE-TOKEN"] == "glpat"

    def test_deletes_by_tag_name(self, http):
        http.request.side_effect = answer({
            ("DELETE", f"{self.PROJECT}/releases/release%2F1"): make_response(None, 204),
            ("DELETE", f"{self.PROJECT}/repository/tags/release%2F1"): make_response(None, 204),
        })

        result = GitLabClient("glpat", "group/tool", http=http).delete_items([Release("release/1")], [Tag("release/1")])

        assert result == (2, 0)
