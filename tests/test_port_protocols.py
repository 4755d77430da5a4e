"""
Tests for the session engine port definitions.

Part of HYG-15: Session engine ports

These tests verify that:
1. Protocol definitions are valid and importable
2. Protocols define the expected methods
3. Real and fake implementations provide every Protocol method
"""
import inspect

import pytest

# All tests in this module are pure logic tests - mark as unit
pytestmark = pytest.mark.unit


PROFILE_STORE_METHODS = ["load", "upsert"]
PLAN_PROVIDER_METHODS = [
    "generate_plan",
    "substitute_exercise",
    "generate_session_feedback",
    "analyze_goal_progress",
]


class TestProtocolImports:
    """Test that all protocols can be imported."""

    def test_ports_import(self):
        from application.ports import PlanProvider, ProfileStore
        assert ProfileStore is not None
        assert PlanProvider is not None


class TestProfileStoreProtocol:
    """Test ProfileStore protocol definition and implementations."""

    def test_has_required_methods(self):
        from application.ports import ProfileStore

        for method in PROFILE_STORE_METHODS:
            assert hasattr(ProfileStore, method), f"Missing method: {method}"

    @pytest.mark.parametrize("implementation", [
        "infrastructure.profile_store.JsonProfileStore",
        "tests.fakes.FakeProfileStore",
    ])
    def test_implementations_provide_methods(self, implementation):
        import importlib

        module_name, class_name = implementation.rsplit(".", 1)
        cls = getattr(importlib.import_module(module_name), class_name)
        for method in PROFILE_STORE_METHODS:
            assert callable(getattr(cls, method, None)), f"{class_name} missing {method}"


class TestPlanProviderProtocol:
    """Test PlanProvider protocol definition and implementations."""

    def test_methods_are_async(self):
        from application.ports import PlanProvider

        for method in PLAN_PROVIDER_METHODS:
            assert inspect.iscoroutinefunction(getattr(PlanProvider, method))

    @pytest.mark.parametrize("implementation", [
        "backend.ai.plan_provider.OpenAIPlanProvider",
        "backend.core.plan_fallbacks.GuardedPlanProvider",
        "tests.fakes.FakePlanProvider",
    ])
    def test_implementations_are_async(self, implementation):
        import importlib

        module_name, class_name = implementation.rsplit(".", 1)
        cls = getattr(importlib.import_module(module_name), class_name)
        for method in PLAN_PROVIDER_METHODS:
            assert inspect.iscoroutinefunction(getattr(cls, method)), f"{class_name}.{method}"

    def test_signatures_match(self):
        from application.ports import PlanProvider
        from backend.ai.plan_provider import OpenAIPlanProvider

        for method in PLAN_PROVIDER_METHODS:
            expected = list(inspect.signature(getattr(PlanProvider, method)).parameters)
            actual = list(inspect.signature(getattr(OpenAIPlanProvider, method)).parameters)
            assert actual == expected, method
