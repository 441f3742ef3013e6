import pytest

from branches import BRANCHES, Branch, find_branch, resolve_branches, validate_registry
from errors import ValidationError


@pytest.mark.parametrize("selector", [None, "", "all", " ALL "])
def test_all_resolves_in_fixed_order(selector):
    assert [b.name for b in resolve_branches(selector)] == ["Sevoke", "Dagapur"]


def test_single_branch_by_name_or_display_name():
    assert resolve_branches("dagapur") == [BRANCHES["Dagapur"]]
    assert find_branch("Sevoke Road") is BRANCHES["Sevoke"]
    assert resolve_branches("Sevoke")[0].orders == "OrderSevoke"


def test_unknown_branch_is_rejected():
    with pytest.raises(ValidationError) as exc:
        resolve_branches("Siliguri")
    assert exc.value.status_code == 400


def test_registry_rejects_shared_collections():
    registry = {
        "A": Branch("A", "A", "Orders", "ExpA", "BookA"),
        "B": Branch("B", "B", "Orders", "ExpB", "BookB"),
    }
    with pytest.raises(RuntimeError):
        validate_registry(registry, order=("A", "B"))
