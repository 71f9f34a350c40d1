from __future__ import annotations

import pytest

from pdfmo.foundation.registry import Registry


def test_register_and_lookup():
    shapes = Registry[int]("option_shapes")
    assert shapes.register("pdfpm", 1) == 1
    assert "pdfpm" in shapes
    assert shapes["pdfpm"] == shapes.get("pdfpm") == 1
    assert shapes.list() == ["pdfpm"]
    assert shapes.name == "option_shapes"
    assert len(shapes) == 1


def test_register_as_decorator():
    mappers = Registry[object]("mappers")

    @mappers.register("condg")
    def to_condg(config):
        return config

    assert mappers["condg"] is to_condg


def test_duplicate_needs_override():
    kinds = Registry[str]("solver_kinds")
    kinds.register("PDFPM", "objective_only")
    with pytest.raises(ValueError, match="already registered in solver_kinds"):
        kinds.register("PDFPM", "with_jacobian")
    kinds.register("PDFPM", "with_jacobian", override=True)
    assert kinds["PDFPM"] == "with_jacobian"


def test_missing_key_suggests_close_names():
    kinds = Registry[int]("solver_kinds")
    for i, name in enumerate(["PDFPM", "ProxGrad", "CondG"]):
        kinds.register(name, i)
    assert kinds.get("Missing", None) is None
    assert kinds.similar("proxgrad") == ["ProxGrad"]
    assert kinds.similar("") == []
    with pytest.raises(KeyError, match="Did you mean: CondG"):
        kinds["condg2"]


def test_copy_is_independent():
    base = Registry[int]("base")
    base.register("a", 1)
    clone = base.copy("clone")
    clone.register("b", 2)
    assert clone.list() == ["a", "b"]
    assert base.list() == ["a"]
    assert clone.name == "clone"
    assert list(base) == ["a"]
