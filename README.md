# fbas_toolkit

A library for working with federated byzantine agreement systems (FBASs),
such as the Stellar network. With it you can:

- read and write FBAS descriptions in the usual JSON node-list format,
- select nodes from that JSON by a predicate,
- group nodes by organization, ISP or country,
- turn node-ID-based results into public keys or grouping names,
- build network graphs (complete, tiered, scale-free, small-world) and read or
  write them as AS-relationship text files, plain or bzip2-compressed,
- simulate how an FBAS grows when nodes choose their quorum sets with a
  quorum set configurator.

It uses only the standard library and needs Python 3.10 or newer.

## Reading and writing an FBAS

`fbas_toolkit.fbas` holds `Fbas`, `Node` and `QuorumSet`. Nodes get IDs in the
order they appear in the JSON input. Validators with unknown public keys are
dropped, validators and inner quorum sets are sorted, and a node without a
quorum set (missing or `null`) gets an unsatisfiable one
(`QuorumSet.new_unsatisfiable()`: no validators, threshold 1). Malformed input
raises `ValueError`.

```python
from fbas_toolkit.fbas import Fbas

fbas = Fbas.from_json_str("""[
    {"publicKey": "Alice", "quorumSet": {"threshold": 2, "validators": ["Alice", "Bob", "Carol"]}},
    {"publicKey": "Bob", "quorumSet": {"threshold": 2, "validators": ["Alice", "Bob", "Carol"]}},
    {"publicKey": "Carol"}
]""")

print(fbas.number_of_nodes())       # 3
print(fbas.nodes[0].quorum_set)     # QuorumSet(validators=[0, 1, 2], inner_quorum_sets=[], threshold=2)
print(fbas.to_json_string_pretty())
```

Other entry points: `Fbas.from_json_file(path)`, `Fbas.from_json_stdin()`,
`Fbas.from_list(decoded_json)`, `Fbas.to_list()` and `Fbas.to_json_string()`.
When writing, a validator ID with no matching node is written as
`"missing #<id>"`. `Fbas.new_generic_unconfigured(n)` and
`Fbas.add_generic_node(quorum_set)` create nodes whose public keys are their
IDs as strings. `QuorumSet.contained_nodes()` returns every node ID in a quorum
set and its inner quorum sets.

## Filtering nodes

```python
from fbas_toolkit.filtered_nodes import FilteredNodes

nodes_json = '[{"publicKey": "Alice", "active": true}, {"publicKey": "Bob", "active": false}]'
inactive = FilteredNodes.from_json_str(nodes_json, lambda node: node.get("active") is False)
print(inactive.into_pretty_vec())   # ['Bob']
```

Input that is not a JSON array yields no nodes; a matching record without a
string `publicKey` raises `ValueError`. `FilteredNodes.from_json_file(path, predicate)`
reads from a file.

## Groupings

`fbas_toolkit.groupings.Groupings` holds a list of `Grouping` (a name and node
IDs). Organizations come from a separate JSON list of `{"name", "validators"}`
entries; ISPs and countries are taken from the `isp` and `geoData.countryName`
fields of the node list itself. ISP and country names lose their commas and one
trailing period, groupings are sorted by name, and empty country names are
ignored.

```python
from fbas_toolkit.fbas import Fbas
from fbas_toolkit.groupings import Groupings

nodes_json = """[
    {"publicKey": "Alice", "isp": "Hetzner", "geoData": {"countryName": "Finland"}},
    {"publicKey": "Bob", "isp": "Amazon.com, Inc.", "geoData": {"countryName": "Germany"}}
]"""
fbas = Fbas.from_json_str(nodes_json)

isps = Groupings.isps_from_json_str(nodes_json, fbas)
print([g.name for g in isps.groupings])   # ['Amazon.com Inc', 'Hetzner']

countries = Groupings.countries_from_json_str(nodes_json, fbas)
print(countries.get_by_member(1).name)    # Germany
print(countries.to_json_string())
```

`Groupings.from_json_str` and `Groupings.organizations_from_json_str` read
organization lists; each `*_from_json_str` has a `*_from_json_file` twin.

## Pretty results

`fbas_toolkit.results` turns node IDs into names:

```python
from fbas_toolkit.results import to_public_keys, pretty_node_sets, pretty_quorum_set

print(to_public_keys([1, 0], fbas))                # ['Bob', 'Alice']
print(pretty_node_sets([{1, 0}, {1}], fbas))       # [['Alice', 'Bob'], ['Bob']]
print(pretty_quorum_set(fbas.nodes[0].quorum_set, fbas).to_dict())
```

`to_public_keys` keeps the given order; `pretty_node_sets` sorts each set by
node ID. Passing a `Groupings` (or using `to_grouping_names`) resolves node IDs
to the name of the grouping that contains them, and to public keys otherwise.
An ID with no node raises `IndexError`.

## Graphs

```python
from fbas_toolkit.graph import Graph

mesh = Graph.new_full_mesh(4)
tiered = Graph.new_tiered_full_mesh([2, 3, 1])
print(tiered.get_in_degrees())      # [4, 4, 3, 3, 3, 0]
print(tiered.get_out_degrees())     # [1, 1, 4, 4, 4, 3]

scale_free = Graph.new_random_scale_free(23, 3, 2)   # Barabási–Albert
small_world = Graph.new_random_small_world(100, 10, 0.05)  # Watts-Strogatz

print(Graph.new_full_mesh(2).to_as_rel_string("example"))
# # example
# 0|1|0
```

AS-relationship lines have the form `sink|source|relation[|...]`, where
relation `0` is a two-way link and `-1` a one-way link from source to sink;
empty lines and lines starting with `#` are skipped and anything else raises
`ValueError`. `Graph.from_as_rel_file(path)` reads bzip2-compressed or plain
files; `graph.to_as_rel_file(path, head_comment)` always writes bzip2.
`parse_as_rel_line(line)` parses a single line.

Graphs also offer `shuffled()`, `is_undirected()`, `number_of_nodes()`,
`get_connected_nodes()` and `get_rank_scores()` (a simplified page rank
without dampening).

## Simulation

A `Simulator` (in `fbas_toolkit.simulation`) adds nodes one at a time. After
each addition every node re-evaluates its quorum set, in a random order each
round, until a round makes no change or the round limit is reached.

```python
from fbas_toolkit.fbas import Fbas
from fbas_toolkit.qsc import IdealQsc, calculate_67p_threshold
from fbas_toolkit.simulation import DebugMonitor, Simulator

monitor = DebugMonitor()
simulator = Simulator(Fbas(), IdealQsc(), monitor)
simulator.simulate_growth(4)
fbas = simulator.finalize()

print(fbas.nodes[0].quorum_set.threshold)  # 3
print(calculate_67p_threshold(4))          # 3
print(len(monitor.events()) > 0)           # True
```

`simulate_global_reevaluation(max_rounds)` returns the number of rounds made.
Events are `AddNode`, `StartGlobalReevaluation`,
`StartGlobalReevaluationRound`, `FinishGlobalReevaluation` and
`QuorumSetChange`; `DummyMonitor` ignores them, `DebugMonitor` records them.

Configurators implement `QuorumSetConfigurator.configure(node_id, fbas)` and
return a `ChangeEffect`:

- `fbas_toolkit.qsc`: `DummyQsc` (never changes anything), `IdealQsc` (all
  nodes, 67% threshold), `SuperSafeQsc` (all nodes, threshold n) and
  `RandomQsc` (randomly chosen, optionally weighted validators;
  `RandomQsc.new_simple(size)`).
- `fbas_toolkit.graph_qsc`: `AllNeighborsQsc`, `GlobalRankQsc` and
  `HigherTierNeighborsQsc`, which build quorum sets from a `Graph`; each has
  `new_67p(...)` and `new_relative(...)` constructors.

Threshold helpers: `calculate_67p_threshold(n)`, `calculate_x_threshold(n, x)`
(at least 1) and `calculate_threshold(n, relative_threshold)`.

## What this package does not do

It does not analyse an FBAS: there is no check for quorum intersection, no
search for minimal quorums, blocking sets or splitting sets, no top-tier
detection, and no merging of quorum sets by grouping. It has no command-line
program; everything is used as a library from Python.