"""Tests for the extraction engine on hand-built source models."""

from pathlib import Path

from di_graph.models import (
    ClassDeclaration,
    Constructor,
    InterfaceDeclaration,
    Marker,
    MarkerArgument,
    Parameter,
    Property,
    SourceUnit,
    TypeRef,
)
from di_graph.analysis import (
    DeclarationIndexer,
    DependencyResolver,
    GraphAssembler,
)


# ── Helpers ───────────────────────────────────────────────────

def _marker(name, *args, literal=True):
    return Marker(name=name, arguments=[
        MarkerArgument(text=f"'{a}'" if literal else a, is_string_literal=literal)
        for a in args
    ])


def _param(type_name, marker=None, name="dep"):
    return Parameter(name=name, type=TypeRef(name=type_name), markers=[marker] if marker else [])


def _prop(type_name, marker=None, name="field"):
    return Property(name=name, type=TypeRef(name=type_name), markers=[marker] if marker else [])


def _cls(name, params=None, props=(), implements=()):
    return ClassDeclaration(
        name=name,
        file_path=Path(f"/fake/{name}.ts"),
        line_number=1,
        implements=list(implements),
        constructors=[Constructor(parameters=list(params))] if params is not None else [],
        properties=list(props),
    )


def _unit(*classes, interfaces=()):
    return SourceUnit(
        file_path=Path("/fake/unit.ts"),
        classes=list(classes),
        interfaces=[InterfaceDeclaration(name=i, file_path=Path("/fake/unit.ts"), line_number=1)
                    for i in interfaces],
    )


def _extract(*units):
    from di_graph.pipeline import extract_graph
    return extract_graph(units)


def _edges(graph):
    return [(e.source, e.target) for e in graph.edges]


# ── Declaration Indexer ───────────────────────────────────────

class TestDeclarationIndexer:
    def test_collects_classes_and_implementers(self):
        units = [
            _unit(_cls("ConsoleLogger", implements=["ILogger"]), interfaces=["ILogger"]),
            _unit(_cls("FileLogger", implements=["ILogger", "Disposable"])),
        ]
        index = DeclarationIndexer().build(units)
        assert list(index.concrete_classes) == ["ConsoleLogger", "FileLogger"]
        assert index.implementations["ILogger"] == ["ConsoleLogger", "FileLogger"]
        assert index.implementations["Disposable"] == ["FileLogger"]
        assert index.interfaces == {"ILogger"}

    def test_unnamed_classes_skipped(self):
        index = DeclarationIndexer().build([_unit(_cls(None, implements=["ILogger"]))])
        assert not index.concrete_classes
        assert not index.implementations

    def test_implementers_not_deduplicated(self):
        units = [
            _unit(_cls("Impl", implements=["I"])),
            _unit(_cls("Impl", implements=["I"])),
        ]
        index = DeclarationIndexer().build(units)
        assert index.implementations["I"] == ["Impl", "Impl"]
        assert list(index.concrete_classes) == ["Impl"]


# ── Graph Assembler ───────────────────────────────────────────

class TestGraphAssembler:
    def test_edge_dedup_and_degrees(self):
        assembler = GraphAssembler()
        assert assembler.add_edge("A", "B") is True
        assert assembler.add_edge("A", "B") is False
        assembler.add_edge("C", "B")
        graph = assembler.finalize()
        assert [n.id for n in graph.nodes] == ["A", "B", "C"]
        by_id = {n.id: n for n in graph.nodes}
        assert (by_id["B"].in_degree, by_id["B"].out_degree) == (2, 0)
        assert (by_id["A"].in_degree, by_id["A"].out_degree) == (0, 1)
        assert len(graph.edges) == 2

    def test_explicit_node_defaults_to_zero_degree(self):
        assembler = GraphAssembler()
        assembler.add_node("Lonely")
        assert assembler.finalize().elements() == [{"id": "Lonely", "in": 0, "out": 0}]

    def test_elements_nodes_then_edges(self):
        assembler = GraphAssembler()
        assembler.add_edge("A", "B")
        assembler.add_edge("B", "C")
        elements = assembler.finalize().elements()
        assert [("id" in e) for e in elements] == [True, True, True, False, False]
        assert elements[3] == {"source": "A", "target": "B"}

    def test_cytoscape_envelope(self):
        assembler = GraphAssembler()
        assembler.add_edge("A", "B")
        wrapped = assembler.finalize().cytoscape_elements()
        assert wrapped[0] == {"data": {"id": "A", "in": 0, "out": 1}}
        assert wrapped[-1] == {"data": {"source": "A", "target": "B"}}


# ── Dependency Resolver ───────────────────────────────────────

class TestConstructorInjection:
    def test_simple_dependency(self):
        graph = _extract(_unit(
            _cls("DatabaseService"),
            _cls("UserService", params=[_param("DatabaseService")]),
        ))
        assert graph.elements() == [
            {"id": "UserService", "in": 0, "out": 1},
            {"id": "DatabaseService", "in": 1, "out": 0},
            {"source": "UserService", "target": "DatabaseService"},
        ]

    def test_duplicate_parameters_collapse(self):
        graph = _extract(_unit(
            _cls("SharedService"),
            _cls("MainService", params=[_param("SharedService", name="s1"),
                                        _param("SharedService", name="s2")]),
        ))
        assert _edges(graph) == [("MainService", "SharedService")]
        assert graph.get_node("MainService").out_degree == 1

    def test_self_injection_ignored(self):
        graph = _extract(_unit(_cls("TreeNode", params=[_param("TreeNode")])))
        assert graph.elements() == []

    def test_unknown_and_primitive_types_skipped(self):
        graph = _extract(_unit(
            _cls("Service", params=[_param(None), _param("HttpClient"), _param("")]),
        ))
        assert graph.elements() == []

    def test_interface_fans_out(self):
        graph = _extract(_unit(
            _cls("ConsoleLogger", implements=["ILogger"]),
            _cls("FileLogger", implements=["ILogger"]),
            _cls("AppService", params=[_param("ILogger")]),
            interfaces=["ILogger"],
        ))
        assert _edges(graph) == [("AppService", "ConsoleLogger"), ("AppService", "FileLogger")]
        assert graph.get_node("ILogger") is None
        assert graph.get_node("AppService").out_degree == 2

    def test_interface_without_implementers(self):
        graph = _extract(_unit(_cls("AppService", params=[_param("ILogger")]), interfaces=["ILogger"]))
        assert graph.elements() == []

    def test_interface_implemented_in_later_unit(self):
        graph = _extract(
            _unit(_cls("AppService", params=[_param("ILogger")]), interfaces=["ILogger"]),
            _unit(_cls("ConsoleLogger", implements=["ILogger"])),
        )
        assert _edges(graph) == [("AppService", "ConsoleLogger")]

    def test_fan_out_skips_declaring_class(self):
        graph = _extract(_unit(
            _cls("BaseHandler", implements=["Handler"]),
            _cls("LoggingHandler", implements=["Handler"], params=[_param("Handler")]),
            interfaces=["Handler"],
        ))
        assert _edges(graph) == [("LoggingHandler", "BaseHandler")]

    def test_inject_marker_overrides_declared_type(self):
        graph = _extract(_unit(
            _cls("EmailService"),
            _cls("SmsService"),
            _cls("Notifier", params=[_param("SmsService", _marker("inject", "EmailService"))]),
        ))
        assert _edges(graph) == [("Notifier", "EmailService")]

    def test_override_applies_without_declared_symbol(self):
        graph = _extract(_unit(
            _cls("EmailService"),
            _cls("Notifier", params=[_param(None, _marker("Inject", "EmailService"))]),
        ))
        assert _edges(graph) == [("Notifier", "EmailService")]

    def test_override_to_unknown_class_keeps_declared_type(self):
        graph = _extract(_unit(
            _cls("EmailService"),
            _cls("Notifier", params=[_param("EmailService", _marker("inject", "MAILER_TOKEN"))]),
        ))
        assert _edges(graph) == [("Notifier", "EmailService")]

    def test_non_literal_argument_ignored(self):
        marker = _marker("inject", "SmsService", literal=False)
        graph = _extract(_unit(
            _cls("EmailService"),
            _cls("SmsService"),
            _cls("Notifier", params=[_param("EmailService", marker)]),
        ))
        assert _edges(graph) == [("Notifier", "EmailService")]

    def test_marker_without_arguments(self):
        graph = _extract(_unit(
            _cls("EmailService"),
            _cls("Notifier", params=[_param("EmailService", _marker("Inject"))]),
        ))
        assert _edges(graph) == [("Notifier", "EmailService")]

    def test_marker_names_are_case_sensitive(self):
        graph = _extract(_unit(
            _cls("EmailService"),
            _cls("SmsService"),
            _cls("Notifier", params=[_param("EmailService", _marker("INJECT", "SmsService"))]),
        ))
        assert _edges(graph) == [("Notifier", "EmailService")]

    def test_override_on_interface_param_uses_override_for_lookup(self):
        # Kind comes from the declared type; implementers are looked up by the override name.
        graph = _extract(_unit(
            _cls("ConsoleLogger", implements=["ILogger"]),
            _cls("AppService", params=[_param("ILogger", _marker("inject", "ConsoleLogger"))]),
            interfaces=["ILogger"],
        ))
        assert graph.elements() == []

    def test_override_to_self_ignored(self):
        graph = _extract(_unit(
            _cls("Other"),
            _cls("Notifier", params=[_param("Other", _marker("inject", "Notifier"))]),
        ))
        assert graph.elements() == []


class TestPropertyInjection:
    def test_annotated_property(self):
        graph = _extract(_unit(
            _cls("ConfigService"),
            _cls("ApiService", props=[_prop("ConfigService", _marker("inject", "ConfigService"))]),
        ))
        assert _edges(graph) == [("ApiService", "ConfigService")]

    def test_all_property_marker_names(self):
        for name in ("inject", "Inject", "injectable", "Injectable"):
            graph = _extract(_unit(
                _cls("ConfigService"),
                _cls("ApiService", props=[_prop("ConfigService", _marker(name))]),
            ))
            assert _edges(graph) == [("ApiService", "ConfigService")], name

    def test_unannotated_property_ignored(self):
        graph = _extract(_unit(
            _cls("ConfigService"),
            _cls("ApiService", props=[_prop("ConfigService")]),
        ))
        assert graph.elements() == []

    def test_interface_property_does_not_fan_out(self):
        graph = _extract(_unit(
            _cls("ConsoleLogger", implements=["ILogger"]),
            _cls("ApiService", props=[_prop("ILogger", _marker("Inject"))]),
            interfaces=["ILogger"],
        ))
        assert graph.elements() == []

    def test_constructor_and_property_share_one_edge(self):
        graph = _extract(_unit(
            _cls("ConfigService"),
            _cls("ApiService",
                 params=[_param("ConfigService")],
                 props=[_prop("ConfigService", _marker("Inject"))]),
        ))
        assert _edges(graph) == [("ApiService", "ConfigService")]
        assert graph.get_node("ConfigService").in_degree == 1

    def test_injectable_not_an_override_for_parameters(self):
        graph = _extract(_unit(
            _cls("EmailService"),
            _cls("SmsService"),
            _cls("Notifier", params=[_param("EmailService", _marker("Injectable", "SmsService"))]),
        ))
        assert _edges(graph) == [("Notifier", "EmailService")]


class TestGraphProperties:
    def _project(self):
        return (
            _unit(
                _cls("ConsoleLogger", implements=["ILogger"]),
                _cls("FileLogger", implements=["ILogger"]),
                interfaces=["ILogger"],
            ),
            _unit(
                _cls("Db", params=[_param("ILogger")]),
                _cls("Repo", params=[_param("Db"), _param("Db"), _param("ILogger")]),
                _cls("Svc", params=[_param("Repo")], props=[_prop("Db", _marker("Inject"))]),
                _cls("Isolated", params=[_param("string")]),
            ),
        )

    def test_idempotent(self):
        assert _extract(*self._project()).elements() == _extract(*self._project()).elements()

    def test_degree_consistency(self):
        graph = _extract(*self._project())
        for node in graph.nodes:
            assert node.out_degree == len(graph.dependencies_of(node.id))
            assert node.in_degree == len(graph.dependents_of(node.id))

    def test_edges_unique_and_no_self_loops(self):
        graph = _extract(*self._project())
        pairs = _edges(graph)
        assert len(pairs) == len(set(pairs))
        assert all(s != t for s, t in pairs)

    def test_isolated_classes_excluded(self):
        graph = _extract(*self._project())
        assert graph.get_node("Isolated") is None

    def test_every_edge_endpoint_is_a_node(self):
        graph = _extract(*self._project())
        ids = {n.id for n in graph.nodes}
        for source, target in _edges(graph):
            assert source in ids and target in ids

    def test_empty_project(self):
        assert _extract().elements() == []
        assert _extract(_unit(interfaces=["ILogger"])).elements() == []


class TestResolverDirect:
    def test_resolve_class_into_shared_assembler(self):
        index = DeclarationIndexer().build([_unit(_cls("A"), _cls("B"))])
        assembler = GraphAssembler()
        resolver = DependencyResolver(index)
        resolver.resolve_class(_cls("C", params=[_param("A")]), assembler)
        resolver.resolve_class(_cls("C", params=[_param("A"), _param("B")]), assembler)
        graph = assembler.finalize()
        assert _edges(graph) == [("C", "A"), ("C", "B")]
        assert graph.get_node("C").out_degree == 2


# ── Graph queries ─────────────────────────────────────────────

class TestGraphQueries:
    def _hub_graph(self, fan_in):
        assembler = GraphAssembler()
        for i in range(fan_in):
            assembler.add_edge(f"Client{i}", "Hub")
        return assembler.finalize()

    def test_coupling_levels(self):
        assert self._hub_graph(2).coupling("Hub") == "low"
        assert self._hub_graph(3).coupling("Hub") == "medium"
        assert self._hub_graph(6).coupling("Hub") == "high"
        assert self._hub_graph(1).coupling("Missing") == "low"

    def test_dependencies_and_dependents(self):
        graph = self._hub_graph(2)
        assert graph.dependents_of("Hub") == ["Client0", "Client1"]
        assert graph.dependencies_of("Client0") == ["Hub"]
        assert graph.dependencies_of("Hub") == []

    def test_summary(self):
        summary = self._hub_graph(3).summary()
        assert summary["nodes"] == 4
        assert summary["edges"] == 3
        assert summary["coupling"] == {"low": 3, "medium": 1, "high": 0}
        assert summary["most_depended_on"] == ["Hub"]
