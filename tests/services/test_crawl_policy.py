from unittest.mock import Mock

from kbcrawl.services.link_policy import AllowAllLinkPolicy, CrawlPolicy


def test_depth_limits_fetch_and_expansion():
    policy = CrawlPolicy(max_depth=3)

    assert not policy.should_skip_due_to_depth(0)
    assert not policy.should_skip_due_to_depth(2)
    assert policy.should_skip_due_to_depth(3)

    assert policy.should_expand(0)
    assert policy.should_expand(1)
    # deepest fetched layer is a leaf
    assert not policy.should_expand(2)


def test_single_page_depth_never_expands():
    policy = CrawlPolicy(max_depth=1)
    assert not policy.should_skip_due_to_depth(0)
    assert not policy.should_expand(0)


def test_default_link_policy_allows_everything():
    assert AllowAllLinkPolicy().allows("https://example.com/private")
    assert not CrawlPolicy(max_depth=2).should_skip_due_to_policy("https://example.com/private")


def test_custom_link_policy_is_consulted():
    link_policy = Mock()
    link_policy.allows.return_value = False
    policy = CrawlPolicy(max_depth=2, link_policy=link_policy)
    assert policy.should_skip_due_to_policy("https://example.com/blocked")
    link_policy.allows.assert_called_once_with("https://example.com/blocked")
