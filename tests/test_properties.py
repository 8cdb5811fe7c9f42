"""Property-based tests for resolution and installation using Hypothesis."""

from hypothesis import given, settings, strategies as st

import export_examples

from meta_exporter.errors import (
    InvalidIdentifierError,
    NameClashError,
    TargetNameCollisionError,
)
from meta_exporter.installer import DictNamespace, install
from meta_exporter.models import DEFAULT_WRAP_SPEC
from meta_exporter.registry import Registry
from meta_exporter.request import parse_request
from meta_exporter.resolver import BASE_OPTIONS, expand_item, resolve, target_name
from meta_exporter.wrap_cache import WrapCache
from meta_exporter.wrapping import DefaultWrapService


REGISTRY = Registry.from_module(export_examples)
EXPORTABLE = ["f1", "f2", "f3", "f4", "f5", "f6", "f7", "f8", "add", "plain"]
TAGS = ["a", "b", "default", "math", "never", "unknown"]

affixes = st.sampled_from(["", "x", "x_", "_", "f", "1"])
names = st.sampled_from(EXPORTABLE)


def _final_targets(request):
    """Target name of each symbol under the last item that selects it."""
    targets = {}
    for item in request.items:
        options = item.options.merged_onto(BASE_OPTIONS)
        for symbol in expand_item(item, REGISTRY):
            targets[symbol] = target_name(symbol, item, options)
    return targets


@st.composite
def export_items(draw):
    """A name or tag token with optional renaming options."""
    if draw(st.booleans()):
        token = draw(names)
        options = {}
        if draw(st.booleans()):
            options["as"] = draw(st.sampled_from(EXPORTABLE + ["x", "y_"]))
    else:
        token = ":" + draw(st.sampled_from(TAGS))
        options = {}
    if draw(st.booleans()):
        options["prefix"] = draw(affixes)
    if draw(st.booleans()):
        options["suffix"] = draw(affixes)
    return (token, options)


@given(st.lists(names, min_size=1, max_size=6))
def test_bare_names_map_to_themselves(tokens):
    """Bare names resolve to themselves with the default wrap spec."""
    plan = resolve(parse_request(tokens), REGISTRY)

    assert plan.as_mapping() == {name: name for name in dict.fromkeys(tokens)}
    assert all(entry.wrap_spec == DEFAULT_WRAP_SPEC for entry in plan)


@given(st.sampled_from(TAGS), st.integers(min_value=1, max_value=4))
def test_tag_expansion_is_idempotent(tag, repeat):
    """Repeating a tag yields one entry per symbol in registration order."""
    plan = resolve(parse_request([":" + tag] * repeat), REGISTRY)

    assert [entry.source_symbol for entry in plan] == list(REGISTRY.lookup_by_tag(tag))


@given(st.lists(export_items(), min_size=1, max_size=6))
@settings(max_examples=300)
def test_targets_never_collide(items):
    """Distinct symbols never share a target name in a resolved plan."""
    try:
        plan = resolve(parse_request(items), REGISTRY)
    except TargetNameCollisionError as e:
        targets = _final_targets(parse_request(items))
        first, second = e.symbols
        assert first != second
        assert targets[first] == targets[second] == e.target_name
        return
    except InvalidIdentifierError:
        return

    targets = plan.target_names
    sources = [entry.source_symbol for entry in plan]
    assert len(set(targets)) == len(targets)
    assert len(set(sources)) == len(sources)


@given(
    st.lists(names, min_size=1, max_size=5, unique=True),
    st.lists(st.sampled_from(EXPORTABLE + ["other"]), max_size=5),
)
def test_bail_is_all_or_nothing(requested, existing):
    """After a bail clash the namespace holds exactly what it held before."""
    before = {name: object() for name in existing}
    namespace = DictNamespace(dict(before))
    plan = resolve(parse_request(requested, on_clash="bail"), REGISTRY)
    cache = WrapCache(REGISTRY, DefaultWrapService())

    try:
        install(plan, namespace, cache)
    except NameClashError as e:
        assert e.target_name in before
        assert namespace.mapping == before
    else:
        assert not set(requested) & set(before)
        assert set(namespace.mapping) == set(before) | set(requested)
