# ctitools

A library for working with Cross-domain Typed Identifiers (CTI), such as
`cti.a.p.gr.namespace.v1.0~a.p.integrations.datacenters.v1.0`. It has no
dependencies outside the standard library.

## Modules

- `ctitools.expression` holds the expression model: `Expression`, `Node`,
  `Version` (with `new_version` and `new_partial_version`), `QueryAttribute`
  and `QueryAttributeValue`. With it you can:
  - render an expression back to text with `str()`;
  - match with wildcards using `Expression.match` and
    `Expression.match_ignore_query`;
  - match query attributes using `match_query_attributes`;
  - fill in dynamic parameters with
    `Expression.interpolate_dynamic_parameter_values`.

  Failures raise `ExpressionError`, which is a subclass of `ValueError`.
- `ctitools.consts` holds the CTI annotation names (`CTI`, `REFERENCE`,
  `SCHEMA` and others), `TRAITS`, and the `AccessModifier` enum with
  `integer()` ranks: public 0, protected 1, private 2.
- `ctitools.schema` provides `Schema`, a JSON Schema node that carries CTI
  annotation keywords. It offers `is_ref`, `is_any`, `is_any_of` and
  `get_ref_schema`. The last one resolves `#/definitions/...` references.
- `ctitools.annotations` provides `Annotations` and `AnnotationsCollector`.
  `AnnotationsCollector.collect(schema)` gathers annotations keyed by
  GJSON-style path, such as `.foo` for an object property and `.#` for array
  items.
- `ctitools.attribute_selector` provides `parse_attribute_selector("foo.bar")`,
  which returns an `AttributeSelector`. Its `walk_json` method walks nested
  dicts and its `walk_schema` method walks schema properties. A missing key
  or a step into something that is not an object raises `LookupError`.
- `ctitools.schema_checks` provides `compare_schemas`, `compare_values` and
  `compare_annotations`. Each returns a list of `Message` findings with a
  `Severity` of `ERROR`, `WARNING` or `INFO`.
- `ctitools.compatibility` provides `CompatibilityChecker`. It compares two
  versions of a package with `check_packages`, records new and removed
  entities, and checks each new minor version against the previous one when
  that version is present. It also compares single entities with
  `check_entities`. After a check, `passed` is False if any error was found,
  and `report()` renders the findings as text. Problems that stop the check
  raise `CompatibilityError`.
- `ctitools.archive.tgzwriter.TarGzArchiver` and
  `ctitools.archive.zipwriter.ZipArchiver` write `.tar.gz` and `.zip`
  archives. Both implement the `ctitools.archive.base.Archiver` interface:
  `open`, `write_bytes`, `write_file`, `write_directory` and `close`.
  `write_directory` never adds the archive to itself. It accepts an
  exclusion callback that can return `Skip.FILE` or `Skip.DIR`. Archivers
  also work as context managers.
- `ctitools.command` holds helpers for command-line front ends:
  - `parse_packages(["source@v1"])`;
  - `parse_pack_format("zip")`, which returns a `PackFormat`;
  - `CommandError` and `wrap_error`.

## Examples

Build an expression and match against it:

```python
from ctitools.expression import Expression, Node, new_version

base = Node("a", "p", "gr.namespace", new_version(1, 0))
base.child = Node("a", "p", "integrations.datacenters", new_version(1, 0))
concrete = Expression(head=base)
print(concrete)  # cti.a.p.gr.namespace.v1.0~a.p.integrations.datacenters.v1.0

pattern = Expression(head=Node("a", "p", "gr.*"))
print(pattern)                    # cti.a.p.gr.*
print(pattern.match(concrete))    # True
```

Write an archive:

```python
from ctitools.archive.zipwriter import ZipArchiver

with ZipArchiver().open("out/package.zip") as archive:
    archive.write_bytes("index.json", b"{}")
    archive.write_directory("my_package", None)
```

## What it does not do

- **No text parser.** The package does not parse CTI text into an
  `Expression`. You build expressions from `Node` objects. To interpolate
  dynamic parameters, supply a parsing callable as `Expression.parser`;
  without one, interpolating a dynamic parameter raises `ExpressionError`.
- **No package reader.** The package has no reader for package files or
  RAML sources, no entity registry, and no package manager.
  `CompatibilityChecker` accepts any objects that have the attributes its
  module docstring lists.
- **No command-line tool.** The package provides no command; `ctitools.command`
  holds only the helpers listed above.

## Installing for development

```
pip install -e ".[test]"
pytest
```