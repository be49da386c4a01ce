import pytest

from diforge.container import Container
from diforge.exceptions import DIForgeConstructionError, DIForgeMissingParameterError
from tests.sample_classes import Bar, Baz, Bazz, Entity, Foo, Logger


def test_injection_calls_method(container: Container) -> None:
    container.set_injection(Entity, "set_id", {"id": 12})

    entity = container.get(Entity)

    assert isinstance(entity, Entity)
    assert entity.id == 12


def test_injection_calls_multiple_methods(container: Container) -> None:
    container.set_injection(Entity, "set_id", {"id": 12})
    container.set_injection(Entity, "set_user_id", {"user_id": 15})

    entity = container.get(Entity)

    assert entity.id == 12
    assert entity.user_id == 15


def test_injection_can_be_applied_multiple_times_in_order(container: Container) -> None:
    container.set_injection(Logger, "add_logger", {"logger": "foo"})
    container.set_injection(Logger, "add_logger", {"logger": "bar"})

    logger = container.get(Logger)

    assert logger.loggers == ["foo", "bar"]


def test_injection_can_be_applied_to_alias(container: Container) -> None:
    container.set_injection("Alias", "set_id", {"id": 12})
    container.set_alias("Alias", Entity)

    entity = container.get("Alias")

    assert isinstance(entity, Entity)
    assert entity.id == 12


def test_injection_without_parameters(container: Container) -> None:
    container.set_injection(Foo, "do_something")

    assert container.get(Foo).something_happened is True


def test_injection_with_instance_marker(container: Container) -> None:
    container.set_injection(Logger, "add_logger", {"logger": {"instanceOf": Entity}})

    logger = container.get(Logger)

    assert isinstance(logger.loggers[0], Entity)


def test_injection_builds_typed_parameter(container: Container) -> None:
    container.set_injection(Bar, "set_entity")

    bar = container.get(Bar)

    assert isinstance(bar.entity, Entity)


def test_injection_with_instance_marker_for_typed_parameter(container: Container) -> None:
    container.set_injection(Bar, "set_entity", {"entity": {"instanceOf": Entity}})

    assert isinstance(container.get(Bar).entity, Entity)


def test_injection_with_alias_marker(container: Container) -> None:
    container.set_alias("E", Entity)
    container.set_injection("E", "set_id", {"id": 3})
    container.set_injection(Bar, "set_entity", {"entity": {"instanceOf": "E"}})

    bar = container.get(Bar)

    assert isinstance(bar.entity, Entity)
    assert bar.entity.id == 3


def test_injection_with_variadic_parameters(container: Container) -> None:
    container.set_injection(Baz, "set_bazzles", {"bazzles": [1, 2, 4]})

    assert container.get(Baz).bazzles == [1, 2, 4]


def test_injection_with_typed_variadic_markers(container: Container) -> None:
    container.set_injection(
        Bazz,
        "set_bazzles",
        {"bazzles": [{"instanceOf": Baz}, {"instanceOf": Baz}]},
    )

    bazz = container.get(Bazz)

    assert len(bazz.bazzles) == 2
    assert all(isinstance(baz, Baz) for baz in bazz.bazzles)


def test_injection_with_empty_variadic(container: Container) -> None:
    container.set_injection(Baz, "set_bazzles")
    container.set_injection(Bazz, "set_bazzles")

    assert container.get(Baz).bazzles == []
    assert container.get(Bazz).bazzles == []


def test_alias_injections_do_not_leak(container: Container) -> None:
    container.set_alias("Foo1", Foo)
    container.set_alias("Foo2", Foo)
    container.set_injection("Foo1", "do_something")
    container.set_injection("Foo2", "do_something_else")

    foo = container.get(Foo)
    foo1 = container.get("Foo1")
    foo2 = container.get("Foo2")

    assert foo1.something_happened is True
    assert foo1.something_else_happened is False
    assert foo2.something_happened is False
    assert foo2.something_else_happened is True
    assert foo.something_happened is False
    assert foo.something_else_happened is False


def test_class_injections_do_not_apply_to_aliases(container: Container) -> None:
    container.set_alias("Foo1", Foo)
    container.set_injection(Foo, "do_something")

    assert container.get(Foo).something_happened is True
    assert container.get("Foo1").something_happened is False


def test_injected_values_are_bound_per_build(container: Container) -> None:
    container.set_injection(Logger, "add_logger", {"logger": {"instanceOf": Entity}})
    container.set_shared(Entity, False)

    first = container.create(Logger)
    second = container.create(Logger)

    assert first.loggers[0] is not second.loggers[0]


def test_injection_registered_after_first_build_is_applied(container: Container) -> None:
    assert container.create(Foo).something_happened is False

    container.set_injection(Foo, "do_something")

    assert container.create(Foo).something_happened is True


def test_injection_missing_parameter(container: Container) -> None:
    container.set_injection(Entity, "set_id")

    with pytest.raises(DIForgeMissingParameterError, match="'id'"):
        container.get(Entity)


def test_injection_of_unknown_method_raises_construction_error(container: Container) -> None:
    container.set_injection(Entity, "does_not_exist")

    with pytest.raises(DIForgeConstructionError) as exc_info:
        container.get(Entity)

    assert isinstance(exc_info.value.cause, AttributeError)


def test_injection_on_factory_product(container: Container) -> None:
    container.set_factory("entity", lambda: Entity())
    container.set_injection("entity", "set_id", {"id": 7})

    assert container.get("entity").id == 7
