from diforge.container import Container
from tests.sample_classes import TV, Variadic, VariadicWithTypeHint


def test_variadic_parameters_are_spliced(container: Container) -> None:
    container.set_params(Variadic, {"a": 1, "b": [2, 3, 4]})

    instance = container.get(Variadic)

    assert instance.a == 1
    assert instance.b == (2, 3, 4)


def test_variadic_parameters_can_be_left_empty(container: Container) -> None:
    container.set_params(Variadic, {"a": 1})

    instance = container.get(Variadic)

    assert instance.a == 1
    assert instance.b == ()


def test_typed_variadic_parameters_can_be_left_empty(container: Container) -> None:
    container.set_params(VariadicWithTypeHint, {"a": 1})

    assert container.get(VariadicWithTypeHint).b == ()


def test_typed_variadic_parameters_accept_marker(container: Container) -> None:
    container.set_params(VariadicWithTypeHint, {"a": 1, "b": [{"instanceOf": TV}]})

    instance = container.get(VariadicWithTypeHint)

    assert instance.a == 1
    assert len(instance.b) == 1
    assert isinstance(instance.b[0], TV)


def test_typed_variadic_parameters_accept_multiple_markers(container: Container) -> None:
    container.set_shared(TV, False)
    container.set_params(
        VariadicWithTypeHint,
        {"a": 1, "b": [{"instanceOf": TV}, {"instanceOf": TV}]},
    )

    instance = container.get(VariadicWithTypeHint)

    assert len(instance.b) == 2
    assert all(isinstance(tv, TV) for tv in instance.b)
    assert instance.b[0] is not instance.b[1]


def test_aliases_can_be_passed_to_variadic_parameters(container: Container) -> None:
    container.set_alias("LargeTV", TV, {"inches": 55})
    container.set_params(
        VariadicWithTypeHint,
        {"a": 1, "b": [{"instanceOf": "LargeTV"}, {"instanceOf": TV}]},
    )

    instance = container.get(VariadicWithTypeHint)

    assert [tv.inches for tv in instance.b] == [55, 32]


def test_variadic_parameters_can_be_set_at_call_time(container: Container) -> None:
    container.set_params(Variadic, {"a": 1})

    instance = container.create(Variadic, {"b": [2, 3, 4]})

    assert instance.b == (2, 3, 4)


def test_scalar_variadic_override_is_one_argument(container: Container) -> None:
    instance = container.create(Variadic, {"a": 1, "b": "single"})

    assert instance.b == ("single",)


def test_nested_list_elements_are_kept_as_one_argument(container: Container) -> None:
    instance = container.create(Variadic, {"a": 1, "b": [[1, 2], [3]]})

    assert instance.b == ([1, 2], [3])


def test_repeated_markers_build_distinct_instances(container: Container) -> None:
    container.get(TV)

    instance = container.create(
        VariadicWithTypeHint,
        {"a": 1, "b": [{"instanceOf": TV}, {"instanceOf": TV}]},
    )

    assert instance.b[0] is not instance.b[1]
    assert container.get(TV) not in instance.b


def test_marker_on_shared_identifier_reuses_instance(container: Container) -> None:
    container.set_shared(TV)

    instance = container.create(
        VariadicWithTypeHint,
        {"a": 1, "b": [{"instanceOf": TV}, {"instanceOf": TV}]},
    )

    assert instance.b[0] is instance.b[1] is container.get(TV)
