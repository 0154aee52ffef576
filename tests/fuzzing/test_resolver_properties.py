"""
Hypothesis-based property tests for the resolver.

Random acyclic catalogs are generated by letting each module require only
modules declared before it.  Bundles are closed selections over the same
catalog, so every generated catalog passes ModuleCatalog.build.

Properties:
- Closure is complete, duplicate-free and starts with the module itself
- validate() accepts exactly the dependency-closed sets
- enable/enable_many always produce a valid superset and are idempotent
- A confirmed cascade always leaves a valid set without the target
- Disabling an inactive module changes nothing
- Applying a bundle yields exactly the bundle, whatever came before
"""

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from activation_kernel.domain.cascade import plan_disable
from activation_kernel.domain.catalog import Bundle, ModuleCatalog
from activation_kernel.domain.closure import expand_selection
from activation_kernel.domain.validator import validate
from activation_kernel.services.activation_controller import (
    ActivationController,
    ChangeStatus,
)
from tests.conftest import make_module

PROPERTY_SETTINGS = settings(
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)


@composite
def acyclic_catalogs(draw, max_modules: int = 8) -> ModuleCatalog:
    """A catalog whose modules only require earlier declarations."""
    count = draw(st.integers(min_value=1, max_value=max_modules))
    ids = [f"m{i}" for i in range(count)]
    modules = []
    for index, module_id in enumerate(ids):
        earlier = ids[:index]
        requires = draw(st.lists(st.sampled_from(earlier), unique=True, max_size=3)) if earlier else []
        modules.append(make_module(module_id, *requires))

    bare = ModuleCatalog.build(modules, catalog_id="generated")
    bundle_count = draw(st.integers(min_value=0, max_value=3))
    bundles = []
    for index in range(bundle_count):
        picks = draw(st.lists(st.sampled_from(ids), min_size=1, max_size=4))
        bundles.append(
            Bundle(
                id=f"bundle-{index}",
                name=f"Bundle {index}",
                modules=expand_selection(bare, picks),
            )
        )
    return ModuleCatalog.build(modules, bundles, catalog_id="generated")


@composite
def catalog_and_subset(draw):
    catalog = draw(acyclic_catalogs())
    subset = draw(st.frozensets(st.sampled_from(catalog.module_ids)))
    return catalog, subset


@composite
def catalog_and_valid_set(draw):
    """A catalog and a dependency-closed active set."""
    catalog = draw(acyclic_catalogs())
    picks = draw(st.lists(st.sampled_from(catalog.module_ids), max_size=5))
    return catalog, frozenset(expand_selection(catalog, picks))


def _is_closed(catalog: ModuleCatalog, module_set: frozenset[str]) -> bool:
    return all(
        dep in module_set
        for module_id in module_set
        for dep in catalog.require_module(module_id).requires
    )


class TestClosureProperties:
    @given(catalog=acyclic_catalogs())
    @PROPERTY_SETTINGS
    def test_closure_is_complete(self, catalog):
        for module_id in catalog.module_ids:
            members = catalog.closure_of(module_id)
            assert members[0] == module_id
            assert len(members) == len(set(members))
            assert _is_closed(catalog, frozenset(members))

    @given(catalog=acyclic_catalogs())
    @PROPERTY_SETTINGS
    def test_required_by_mirrors_requires(self, catalog):
        for module in catalog.list_modules():
            for dep in module.requires:
                assert module.id in catalog.require_module(dep).required_by
            for dependent in module.required_by:
                assert module.id in catalog.require_module(dependent).requires


class TestValidatorProperties:
    @given(case=catalog_and_subset())
    @PROPERTY_SETTINGS
    def test_valid_iff_closed(self, case):
        catalog, subset = case
        result = validate(catalog, subset)
        assert result.valid == _is_closed(catalog, subset)
        assert result.valid == (not result.errors)

    @given(case=catalog_and_subset())
    @PROPERTY_SETTINGS
    def test_expansion_is_always_valid(self, case):
        catalog, subset = case
        assert validate(catalog, expand_selection(catalog, subset)).valid


class TestEnableProperties:
    @given(case=catalog_and_subset(), data=st.data())
    @PROPERTY_SETTINGS
    def test_enable_yields_valid_superset(self, case, data):
        catalog, before = case
        module_id = data.draw(st.sampled_from(catalog.module_ids))
        result = ActivationController(catalog).enable(module_id, before)
        assert result.status == ChangeStatus.ACCEPTED
        assert module_id in result.new_active_set
        assert before <= result.new_active_set
        assert validate(catalog, result.new_active_set).valid
        assert module_id not in result.auto_added

    @given(case=catalog_and_valid_set(), data=st.data())
    @PROPERTY_SETTINGS
    def test_enable_is_idempotent(self, case, data):
        catalog, before = case
        controller = ActivationController(catalog)
        module_id = data.draw(st.sampled_from(catalog.module_ids))
        first = controller.enable(module_id, before)
        second = controller.enable(module_id, first.new_active_set)
        assert second.new_active_set == first.new_active_set
        assert second.auto_added == ()

    @given(case=catalog_and_valid_set(), data=st.data())
    @PROPERTY_SETTINGS
    def test_enable_many_matches_sequential_enables(self, case, data):
        catalog, before = case
        controller = ActivationController(catalog)
        picks = data.draw(st.lists(st.sampled_from(catalog.module_ids), max_size=4))
        together = controller.enable_many(picks, before).new_active_set
        one_by_one = before
        for module_id in picks:
            one_by_one = controller.enable(module_id, one_by_one).new_active_set
        assert together == one_by_one


class TestDisableProperties:
    @given(case=catalog_and_valid_set(), data=st.data())
    @PROPERTY_SETTINGS
    def test_confirmed_cascade_leaves_valid_set(self, case, data):
        catalog, active = case
        if not active:
            return
        target = data.draw(st.sampled_from(sorted(active)))
        result = ActivationController(catalog).confirm_disable(target, active)
        assert target not in result.new_active_set
        assert validate(catalog, result.new_active_set).valid
        assert result.new_active_set | set(result.removed) == active
        for module_id in result.new_active_set:
            assert target not in catalog.closure_of(module_id)

    @given(case=catalog_and_valid_set(), data=st.data())
    @PROPERTY_SETTINGS
    def test_blocking_is_subset_of_cascade(self, case, data):
        catalog, active = case
        if not active:
            return
        target = data.draw(st.sampled_from(sorted(active)))
        decision = plan_disable(catalog, target, active)
        assert decision.full_cascade_set[0] == target
        assert set(decision.blocking_modules) <= set(decision.full_cascade_set)
        assert decision.can_disable_alone == (decision.full_cascade_set == (target,))

    @given(case=catalog_and_valid_set(), data=st.data())
    @PROPERTY_SETTINGS
    def test_disable_inactive_is_noop(self, case, data):
        catalog, active = case
        inactive = [m for m in catalog.module_ids if m not in active]
        if not inactive:
            return
        target = data.draw(st.sampled_from(inactive))
        result = ActivationController(catalog).disable(target, active)
        assert result.status == ChangeStatus.ACCEPTED
        assert result.new_active_set == active
        assert result.removed == ()
        assert result.decision.is_noop


class TestBundleProperties:
    @given(case=catalog_and_subset(), data=st.data())
    @PROPERTY_SETTINGS
    def test_bundle_replaces_active_set(self, case, data):
        catalog, before = case
        if not catalog.bundles:
            return
        bundle = data.draw(st.sampled_from(catalog.list_bundles()))
        result = ActivationController(catalog).apply_bundle(bundle.id, before)
        assert result.new_active_set == bundle.module_set
        assert set(result.added) == bundle.module_set - before
        assert set(result.removed) == before - bundle.module_set
