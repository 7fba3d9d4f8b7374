from rouse.ids import PolicyId
from rouse.router import AlertRouter, Route


def test_router_matches_first_route():
    policy_a = PolicyId.new()
    policy_b = PolicyId.new()
    router = AlertRouter(
        [
            Route({"service": "api"}, policy_a),
            Route({"service": "web"}, policy_b),
        ]
    )
    assert router.match_alert({"service": "api", "env": "prod"}) == policy_a


def test_router_picks_earliest_of_several_matches():
    policy_a = PolicyId.new()
    policy_b = PolicyId.new()
    router = AlertRouter([Route({"env": "prod"}, policy_a), Route({}, policy_b)])
    assert router.match_alert({"env": "prod"}) == policy_a
    assert router.match_alert({"env": "dev"}) == policy_b


def test_router_no_match_returns_none():
    router = AlertRouter([Route({"service": "api"}, PolicyId.new())])
    assert router.match_alert({"service": "unknown"}) is None


def test_router_requires_all_matchers():
    router = AlertRouter([Route({"service": "api", "env": "prod"}, PolicyId.new())])
    assert router.match_alert({"service": "api"}) is None


def test_router_empty_matchers_matches_everything():
    policy = PolicyId.new()
    router = AlertRouter([Route({}, policy)])
    assert router.match_alert({"anything": "here"}) == policy


def test_router_without_routes_matches_nothing():
    assert AlertRouter([]).match_alert({"service": "api"}) is None