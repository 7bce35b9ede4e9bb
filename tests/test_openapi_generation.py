"""Tests for OpenAPI loading and API reference page generation.

The generator is exercised against the checked-in Horoscope Swagger 2.0 spec
and against small OpenAPI 3 documents written per test. Failure cases assert
that nothing is left behind in the output directory, since navigation would
otherwise resolve links into a half-generated tree.
"""

from __future__ import annotations

from pathlib import Path

import msgspec.json as msgspec_json
import pytest
import requests
from pytest_mock import MockerFixture
from ruamel.yaml import YAML

from aura_docs._constants import API_MANIFEST_TEMPLATE, GENERATED_SIDEBAR_FILENAME
from aura_docs.config import ApiSidebarOptions, ApiSpecConfig, load_site_config
from aura_docs.content import collect_documents, read_front_matter
from aura_docs.errors import MalformedSpecError, MissingFileError, SiteConfigError
from aura_docs.openapi import ApiDocsGenerator, load_openapi_document

PETSTORE = """\
openapi: 3.0.3
info:
  title: Petstore
  version: 1.0.0
paths:
  /pets:
    get:
      tags: [pets]
      operationId: listPets
      summary: List all pets
      parameters:
        - name: limit
          in: query
          schema:
            type: integer
            format: int32
      responses:
        "200":
          description: A paged array of pets
          content:
            application/json:
              schema:
                $ref: "#/components/schemas/Pets"
    post:
      tags: [pets]
      operationId: createPet
      summary: Create a pet
      requestBody:
        required: true
        content:
          application/json:
            schema:
              $ref: "#/components/schemas/Pet"
      responses:
        "201":
          description: Created
  /pets/{petId}:
    get:
      operationId: showPetById
      responses:
        "200":
          description: The pet with {braces} | pipes
components:
  schemas:
    Pet:
      type: object
    Pets:
      type: array
      items:
        $ref: "#/components/schemas/Pet"
"""


def _spec(tmp_path: Path, text: str = PETSTORE, *, group_by: str | None = "tag") -> ApiSpecConfig:
    spec_path = tmp_path / "petstore.yaml"
    spec_path.write_text(text, encoding="utf-8")
    return ApiSpecConfig(
        api_id="petstore",
        spec_path=spec_path,
        output_dir=tmp_path / "docs" / "petstore",
        sidebar_options=ApiSidebarOptions(group_paths_by=group_by),
    )


def test_generates_one_page_per_operation(tmp_path: Path) -> None:
    """Each operation yields one page, grouped into a directory per tag."""
    spec = _spec(tmp_path)
    written = ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()

    relative = [path.relative_to(spec.output_dir).as_posix() for path in written]
    assert relative == [
        "pets/list-pets.mdx",
        "pets/create-pet.mdx",
        "show-pet-by-id.mdx",
    ], "tagged operations go under the tag, untagged ones at the root"
    assert all(path.exists() for path in written), "every returned page should be written"


def test_flat_output_without_grouping(tmp_path: Path) -> None:
    spec = _spec(tmp_path, group_by=None)
    written = ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()

    assert {path.parent for path in written} == {spec.output_dir}


def test_page_front_matter_and_body(tmp_path: Path) -> None:
    spec = _spec(tmp_path)
    ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()

    text = (spec.output_dir / "pets" / "create-pet.mdx").read_text(encoding="utf-8")
    front_matter, body = read_front_matter(text)

    assert front_matter["id"] == "create-pet"
    assert front_matter["title"] == "Create a pet"
    assert front_matter["api_method"] == "post"
    assert front_matter["api_path"] == "/pets"
    assert front_matter["custom_edit_url"] is None
    assert "`POST` `/pets`" in body
    assert "## Request body" in body
    assert "`Pet`" in body, "request schema should be named after its $ref"


def test_mdx_special_characters_are_escaped(tmp_path: Path) -> None:
    spec = _spec(tmp_path)
    ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()

    body = (spec.output_dir / "show-pet-by-id.mdx").read_text(encoding="utf-8")

    assert r"\{braces\}" in body, "braces would otherwise be read as MDX expressions"
    assert r"\| pipes" in body, "pipes would otherwise split the table cell"


def test_sidebar_and_manifest_are_written(tmp_path: Path) -> None:
    spec = _spec(tmp_path)
    generator = ApiDocsGenerator(spec, docs_dir=tmp_path / "docs")
    generator.run()

    sidebar = YAML(typ="safe").load(
        (spec.output_dir / GENERATED_SIDEBAR_FILENAME).read_text(encoding="utf-8")
    )
    assert sidebar[0]["type"] == "category"
    assert sidebar[0]["label"] == "pets"
    assert [item["id"] for item in sidebar[0]["items"]] == [
        "petstore/pets/list-pets",
        "petstore/pets/create-pet",
    ]
    assert sidebar[1] == {"type": "doc", "id": "petstore/show-pet-by-id", "label": "showPetById"}

    manifest_path = spec.output_dir / API_MANIFEST_TEMPLATE.format(api_id="petstore")
    manifest = msgspec_json.decode(manifest_path.read_bytes())
    assert manifest["api_id"] == "petstore"
    assert manifest["pages"] == generator.generated_doc_ids()


def test_generated_doc_ids_match_document_index(tmp_path: Path) -> None:
    """Ids recorded by the generator are the ids content discovery assigns."""
    spec = _spec(tmp_path)
    generator = ApiDocsGenerator(spec, docs_dir=tmp_path / "docs")
    generator.run()

    documents = collect_documents(tmp_path / "docs")

    assert set(generator.generated_doc_ids()) == set(documents.ids)


@pytest.mark.parametrize("operation_id", ["true", "1e3", "null", "017"])
def test_scalar_like_operation_ids_keep_their_text(tmp_path: Path, operation_id: str) -> None:
    """Slugs that read as YAML booleans or numbers stay strings in front matter."""
    text = f"""\
openapi: 3.1.0
info: {{title: Scalars, version: "1"}}
paths:
  /thing:
    get: {{operationId: "{operation_id}", responses: {{"200": {{description: ok}}}}}}
"""
    spec = _spec(tmp_path, text)
    generator = ApiDocsGenerator(spec, docs_dir=tmp_path / "docs")
    generator.run()

    documents = collect_documents(tmp_path / "docs")

    assert documents.ids == generator.generated_doc_ids() == [f"petstore/{operation_id}"]


def test_colliding_slugs_get_suffixes(tmp_path: Path) -> None:
    text = """\
openapi: 3.1.0
info: {title: Dupes, version: "1"}
paths:
  /a:
    get: {operationId: fetch_item, responses: {"200": {description: ok}}}
  /b:
    get: {operationId: fetchItem, responses: {"200": {description: ok}}}
"""
    spec = _spec(tmp_path, text)
    written = ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()

    assert [path.name for path in written] == ["fetch-item.mdx", "fetch-item-2.mdx"]


def test_swagger_body_parameter_becomes_request_body(example_site: Path) -> None:
    config = load_site_config(example_site)
    spec = config.api_specs()[0]

    document = load_openapi_document(spec.spec_path)
    search = next(op for op in document.operations if op.operation_id == "searchTransactions")

    assert search.deprecated is True
    assert search.request_body is not None
    assert search.request_body.schema_type == "TransactionQuery"
    assert search.request_body.content_types == ("application/json",)
    assert all(param.location != "body" for param in search.parameters)


def test_path_level_parameters_are_merged(example_site: Path) -> None:
    config = load_site_config(example_site)
    document = load_openapi_document(config.api_specs()[0].spec_path)

    by_height = next(op for op in document.operations if op.operation_id == "getBlockByHeight")

    assert [(param.name, param.location) for param in by_height.parameters] == [
        ("height", "path"),
        ("chainid", "query"),
    ]
    assert by_height.parameters[0].schema_type == "integer (int64)"


def test_malformed_spec_leaves_no_output(tmp_path: Path) -> None:
    spec = _spec(tmp_path, "openapi: 3.0.0\ninfo: {title: Broken}\npaths: {}\n")

    with pytest.raises(MalformedSpecError, match="is invalid at info"):
        ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()

    assert not spec.output_dir.exists(), "a failed run must not create the output directory"


def test_unparsable_spec_is_malformed(tmp_path: Path) -> None:
    spec = _spec(tmp_path, "openapi: [3.0\n")

    with pytest.raises(MalformedSpecError, match="could not be parsed"):
        ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()


def test_unresolvable_reference_is_malformed(tmp_path: Path) -> None:
    text = PETSTORE.replace(
        "paths:\n",
        "paths:\n  /gone:\n    get:\n      parameters:\n        - $ref: '#/components/parameters/Gone'\n"
        "      responses:\n        '200': {description: ok}\n",
        1,
    )
    spec = _spec(tmp_path, text)

    with pytest.raises(MalformedSpecError, match="unresolvable reference"):
        ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()


@pytest.mark.parametrize(
    ("operation", "location"),
    [
        ("get: {operationId: a, responses: {'200': ok}}", "responses/200"),
        ("post: {operationId: b, requestBody: oops, responses: {'200': {description: ok}}}", "requestBody"),
    ],
)
def test_wrongly_shaped_operation_is_malformed(
    tmp_path: Path, operation: str, location: str
) -> None:
    text = f"""openapi: 3.0.3
info: {{title: Shapes, version: '1'}}
paths:
  /x:
    {operation}
"""
    spec = _spec(tmp_path, text)

    with pytest.raises(MalformedSpecError, match=f"is invalid at paths//x/.*{location}"):
        ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()

    assert not spec.output_dir.exists()


def test_reference_to_non_object_is_malformed(tmp_path: Path) -> None:
    text = """\
openapi: 3.0.3
info: {title: Refs, version: "1"}
paths:
  /x:
    get:
      responses:
        "200": {$ref: "#/components/responses/Plain"}
components:
  responses:
    Plain: just text
"""
    spec = _spec(tmp_path, text)

    with pytest.raises(MalformedSpecError, match="response '200' must be an object, got str"):
        ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()


def test_missing_spec_leaves_no_output(tmp_path: Path) -> None:
    spec = _spec(tmp_path)
    spec.spec_path.unlink()  # type: ignore[union-attr]

    with pytest.raises(MissingFileError, match="OpenAPI spec"):
        ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()

    assert not spec.output_dir.exists()


def test_failed_regeneration_keeps_previous_output(tmp_path: Path) -> None:
    spec = _spec(tmp_path)
    generator = ApiDocsGenerator(spec, docs_dir=tmp_path / "docs")
    first = generator.run()

    spec.spec_path.write_text("swagger: '2.0'\n", encoding="utf-8")  # type: ignore[union-attr]
    with pytest.raises(MalformedSpecError):
        generator.run()

    assert all(path.exists() for path in first), "earlier pages should survive a failed run"


def test_refuses_to_replace_hand_written_directory(tmp_path: Path) -> None:
    spec = _spec(tmp_path)
    spec.output_dir.mkdir(parents=True)
    (spec.output_dir / "notes.md").write_text("# Notes\n", encoding="utf-8")

    with pytest.raises(SiteConfigError, match="Refusing to replace"):
        ApiDocsGenerator(spec, docs_dir=tmp_path / "docs").run()

    assert (spec.output_dir / "notes.md").exists()


def test_regeneration_replaces_stale_pages(tmp_path: Path) -> None:
    spec = _spec(tmp_path)
    generator = ApiDocsGenerator(spec, docs_dir=tmp_path / "docs")
    generator.run()
    stale = spec.output_dir / "pets" / "stale.mdx"
    stale.write_text("---\nid: stale\n---\n", encoding="utf-8")

    generator.run()

    assert not stale.exists(), "pages from earlier runs should not linger"
    siblings = [path.name for path in spec.output_dir.parent.iterdir()]
    assert siblings == ["petstore"], "staging directories should be cleaned up"


def test_clean_removes_generated_output(tmp_path: Path) -> None:
    spec = _spec(tmp_path)
    generator = ApiDocsGenerator(spec, docs_dir=tmp_path / "docs")
    generator.run()

    assert generator.clean() is True
    assert not spec.output_dir.exists()
    assert generator.clean() is False, "cleaning twice is a no-op"


def test_output_outside_docs_is_rejected(tmp_path: Path) -> None:
    spec = _spec(tmp_path)

    with pytest.raises(SiteConfigError, match="inside the docs directory"):
        ApiDocsGenerator(spec, docs_dir=tmp_path / "content").render()


def test_remote_spec_is_fetched_with_session(tmp_path: Path, mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    response = mocker.Mock()
    response.text = PETSTORE
    response.raise_for_status.return_value = None
    session.get.return_value = response
    spec = ApiSpecConfig(
        api_id="petstore",
        spec_path="https://specs.example.test/petstore.yaml",
        output_dir=tmp_path / "docs" / "petstore",
    )

    pages = ApiDocsGenerator(spec, docs_dir=tmp_path / "docs", session=session).render()

    session.get.assert_called_once_with("https://specs.example.test/petstore.yaml", timeout=30)
    assert [page.doc_id for page in pages] == [
        "petstore/list-pets",
        "petstore/create-pet",
        "petstore/show-pet-by-id",
    ]
    session.close.assert_not_called()


def test_remote_fetch_failure_is_malformed(tmp_path: Path, mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = requests.ConnectionError("offline")
    spec = ApiSpecConfig(
        api_id="petstore",
        spec_path="https://specs.example.test/petstore.yaml",
        output_dir=tmp_path / "docs" / "petstore",
    )

    with pytest.raises(MalformedSpecError, match="Failed to fetch"):
        ApiDocsGenerator(spec, docs_dir=tmp_path / "docs", session=session).run()

    assert not spec.output_dir.exists()


def test_example_spec_generates_tag_directories(example_site: Path) -> None:
    config = load_site_config(example_site)
    spec = config.api_specs()[0]

    written = ApiDocsGenerator(spec, docs_dir=config.docs_dir).run()

    directories = sorted({path.parent.name for path in written})
    assert directories == ["account", "block", "horoscope", "transaction"], (
        "one directory per tag, with untagged operations at the output root"
    )
    assert len(written) == 6, "one page per operation in the Horoscope spec"
