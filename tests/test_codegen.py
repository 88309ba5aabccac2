import pytest

from privmx_mcp.codegen import CodeGeneratorRegistry, SetupCodeGenerator, TEMPLATES, create_default_registry
from privmx_mcp.codegen.base import validate_features
from privmx_mcp.errors import CodeGenerationError


def test_typescript_setup_includes_requested_apis() -> None:
    result = create_default_registry().generate_setup_code("typescript", ["threads", "stores"])

    assert 'await Endpoint.setup("/public");' in result.code
    assert "Endpoint.createThreadApi(connection)" in result.code
    assert "Endpoint.createStoreApi(connection)" in result.code
    assert "createInboxApi" not in result.code
    assert "return { connection, threadApi, storeApi };" in result.code
    assert result.files == [{"path": "setup.ts", "content": result.code, "description": "PrivMX project setup"}]
    assert result.instructions[0] == "npm install @simplito/privmx-webendpoint"


def test_module_flag_languages_deduplicate_modules() -> None:
    result = create_default_registry().generate_setup_code("java", ["threads", "events", "inboxes"])

    assert "Set.of(Modules.THREAD, Modules.INBOX)" in result.code
    assert result.files[0]["path"] == "PrivmxSetup.java"


@pytest.mark.parametrize("language", sorted(TEMPLATES))
def test_every_builtin_language_renders(language) -> None:
    result = SetupCodeGenerator(TEMPLATES[language]).generate_setup_code(["threads"])
    assert "{exports}" not in result.code
    assert result.code.endswith("\n")
    assert result.to_dict()["files"][0]["path"] == TEMPLATES[language].file_name


def test_unknown_language_and_feature_raise() -> None:
    registry = create_default_registry()
    with pytest.raises(CodeGenerationError):
        registry.generate_setup_code("cobol", ["threads"])
    with pytest.raises(CodeGenerationError):
        registry.generate_setup_code("typescript", ["teleport"])


def test_validate_features() -> None:
    assert validate_features([" Threads", "stores", "threads"]) == ["threads", "stores"]
    with pytest.raises(CodeGenerationError):
        validate_features([])


def test_registry_languages() -> None:
    registry = create_default_registry(("typescript", "java"))
    assert registry.languages() == ["java", "typescript"]

    empty = CodeGeneratorRegistry()
    with pytest.raises(CodeGenerationError):
        empty.get("typescript")

    with pytest.raises(ValueError):
        create_default_registry(("cobol",))
