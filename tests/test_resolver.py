from datetime import date
from decimal import Decimal

import pytest

from hodl.container import Container
from hodl.errors import ConcreteClassNotFoundError, ContainerError, UnresolvableParameterError
from tests.classes import (
    Bag,
    Car,
    Cockpit,
    Colour,
    Concrete,
    Contract,
    DummyClass,
    Engine,
    Failure,
    HasBrokenAnnotation,
    NeedsBag,
    NeedsContract,
    NeedsDate,
    NeedsGreeter,
    NeedsMarker,
    NeedsName,
    NeedsNeedsContract,
    NeedsResolving,
    NeedsServiceAndConstructorParams,
    NestedResolver,
    NoConstructor,
    Paint,
    PrimitivesTest,
    Resolver,
    Stamped,
    Token,
    Trailer,
)


@pytest.fixture
def container():
    return Container()


def test_object_graph_is_resolved_recursively(container):
    resolved = container.resolve(NeedsResolving)

    assert resolved.resolver.var == "foobar"
    assert isinstance(resolved.resolver.nested, NestedResolver)
    assert resolved.resolver.nested.var == "nested"


def test_classes_without_constructor_parameters(container):
    assert isinstance(container.resolve(NoConstructor), NoConstructor)
    assert container.resolve(DummyClass).foo == "not_set"


def test_subclasses_of_builtin_types_without_constructor(container):
    assert container.resolve(Bag) == {}
    assert isinstance(container.resolve(Failure), Failure)

    resolved = container.resolve(NeedsBag)

    assert isinstance(resolved.bag, Bag)
    assert isinstance(resolved.failure, Failure)


def test_constructor_defined_by_new(container):
    token = container.resolve(Token)

    assert isinstance(token.engine, Engine)
    assert token.label == "token"


def test_resolve_by_dotted_name(container):
    assert isinstance(container.resolve("tests.classes.NeedsResolving"), NeedsResolving)


def test_car_gets_default_engine_and_color(container):
    car = container.resolve(Car)

    assert isinstance(car.engine, Engine)
    assert car.engine.horsepower == 150
    assert car.color == "black"


def test_supplied_arguments_override_defaults(container):
    assert container.resolve(Car, {"color": "red"}).color == "red"
    assert container.resolve(DummyClass, {"string": "has_been_set"}).foo == "has_been_set"


def test_scalar_hints_are_supplied_by_name(container):
    assert container.resolve(PrimitivesTest, {"string": "has_been_set"}).foo == "has_been_set"


def test_supplied_arguments_reach_every_depth(container):
    cockpit = container.resolve(Cockpit, {"color": "red"})

    assert cockpit.color == "red"
    assert cockpit.dashboard.color == "red"


def test_typed_class_parameters_are_not_taken_from_supplied_arguments(container):
    engine = Engine()

    car = container.resolve(Car, {"engine": engine})

    assert car.engine is not engine


def test_enums_and_optional_hints_use_defaults(container):
    paint = container.resolve(Paint)

    assert paint.colour is Colour.BLUE
    assert paint.engine is None
    assert container.resolve(Paint, {"colour": Colour.RED}).colour is Colour.RED


def test_native_value_types_use_defaults(container):
    stamped = container.resolve(Stamped)

    assert stamped.built == date(2020, 1, 1)
    assert stamped.price == Decimal("9.99")


def test_native_value_types_use_supplied_arguments(container):
    due = date(2024, 2, 29)

    assert container.resolve(Stamped, {"built": due}).built is due
    assert container.resolve(NeedsDate, {"due": due}).due is due


def test_native_value_type_without_default_or_argument_raises(container):
    with pytest.raises(ContainerError, match="Unable to introspect constructor of date"):
        container.resolve(NeedsDate)


def test_keyword_only_parameters(container):
    trailer = container.resolve(Trailer, {"load": 12})

    assert isinstance(trailer.car, Car)
    assert trailer.load == 12


def test_bound_values_take_precedence(container):
    container.add_singleton(Resolver, lambda c: c.resolve(Resolver))
    container.get(Resolver).var = "resolved"

    assert container.resolve(NeedsResolving).resolver.var == "resolved"
    assert container.resolve(NeedsResolving).resolver is container.get(Resolver)


def test_bound_values_take_precedence_over_supplied_arguments(container):
    engine = Engine()
    container.add_instance(engine)

    assert container.resolve(Car, {"engine": Engine()}).engine is engine


def test_unbound_interface_raises(container):
    with pytest.raises(ConcreteClassNotFoundError, match="Contract is an interface with no bound implementation"):
        container.resolve(NeedsContract)


def test_unbound_protocol_raises(container):
    with pytest.raises(ConcreteClassNotFoundError, match="Greeter"):
        container.resolve(NeedsGreeter)


def test_unbound_direct_abc_subclass_raises(container):
    with pytest.raises(ConcreteClassNotFoundError, match="Marker is an interface"):
        container.resolve(NeedsMarker)


def test_error_reports_resolution_path(container):
    with pytest.raises(ConcreteClassNotFoundError, match="while resolving NeedsNeedsContract -> NeedsContract"):
        container.resolve(NeedsNeedsContract)


def test_bound_interface_is_injected(container):
    container.add(Concrete, lambda c: Concrete("bound"))
    container.bind(Concrete, Contract)

    resolved = container.resolve(NeedsContract)

    assert isinstance(resolved.contract, Contract)
    assert resolved.contract.name() == "bound"


def test_resolving_an_abstract_class_directly_raises(container):
    with pytest.raises(ContainerError, match="abstract and cannot be instantiated"):
        container.resolve(Contract)


def test_resolving_unknown_class_raises(container):
    with pytest.raises(ContainerError, match="does not exist"):
        container.resolve("imaginaryClass")


def test_unresolvable_parameter_raises(container):
    with pytest.raises(UnresolvableParameterError, match="'name' of NeedsName") as info:
        container.resolve(NeedsName)

    assert isinstance(info.value, TypeError)


def test_introspection_failure_raises(container):
    with pytest.raises(ContainerError, match="Unable to read type annotations"):
        container.resolve(HasBrokenAnnotation)


def test_producers_may_resolve_while_a_resolution_is_in_flight(container):
    container.add(Resolver, lambda c: c.resolve(Resolver))

    resolved = container.resolve(NeedsServiceAndConstructorParams, {"foo": "chaz"})

    assert resolved.foo == "chaz"
    assert isinstance(resolved.resolver, Resolver)


def test_instance_method_is_resolved(container):
    resolved = container.resolve_method(DummyClass(), "has_no_static_params")

    assert isinstance(resolved, Resolver)
    assert isinstance(resolved.nested, NestedResolver)


def test_static_method_is_resolved_by_class(container):
    resolved = container.resolve_method(DummyClass, "is_static")

    assert isinstance(resolved, Resolver)
    assert isinstance(resolved.nested, NestedResolver)


def test_static_method_is_resolved_on_instance(container):
    assert isinstance(container.resolve_method(DummyClass(), "is_static"), Resolver)


def test_class_method_is_resolved(container):
    dummy = container.resolve_method("tests.classes.DummyClass", "from_resolver")

    assert dummy.foo == "from_resolver"
    assert isinstance(dummy.resolver, Resolver)


def test_methods_without_parameters(container):
    assert container.resolve_method(DummyClass(), "has_no_params") is True
    assert container.resolve_method(DummyClass, "static_has_no_params") is True


def test_methods_with_supplied_arguments(container):
    assert container.resolve_method(DummyClass(), "has_params", {"param": "not null"}) == "not null"
    assert container.resolve_method(DummyClass(), "has_params") is None


def test_method_uses_bound_values(container):
    container.add_singleton(Resolver, lambda c: c.resolve(Resolver))
    container.get(Resolver).var = "resolved"

    assert container.resolve_method(DummyClass(), "has_no_static_params").var == "resolved"


def test_existing_instance_is_used_as_receiver(container):
    instance = container.resolve(NeedsResolving)

    resolver = container.resolve_method(instance, "has_no_static_params")

    assert instance.method_resolver is resolver


def test_instance_method_by_class_builds_bare_receiver(container):
    assert isinstance(container.resolve_method(DummyClass, "has_no_static_params"), Resolver)


def test_instance_method_by_class_needing_arguments_raises(container):
    with pytest.raises(ContainerError, match="cannot be built without arguments"):
        container.resolve_method(NeedsName, "describe")


def test_missing_method_raises(container):
    with pytest.raises(ContainerError, match=r"DummyClass.doesnt_exist\(\) does not exist"):
        container.resolve_method(DummyClass(), "doesnt_exist")


def test_non_callable_attribute_raises(container):
    with pytest.raises(ContainerError, match="not callable"):
        container.resolve_method(DummyClass(), "foo")


def test_method_on_unknown_class_raises(container):
    with pytest.raises(ContainerError, match="does not exist"):
        container.resolve_method("DoesntExist", "has_no_static_params")
