"""Template-based setup code generators, one per target language."""

from dataclasses import dataclass

from privmx_mcp.codegen.base import CodeGenerator, GeneratedCode, validate_features


@dataclass(frozen=True)
class SetupTemplate:
    """Language-specific pieces of a setup file."""

    language: str
    file_name: str
    header: str
    connect: str
    features: dict[str, str]
    footer: str
    instructions: tuple[str, ...]


_JS_FEATURES = {
    "threads": "const threadApi = await Endpoint.createThreadApi(connection);",
    "stores": "const storeApi = await Endpoint.createStoreApi(connection);",
    "inboxes": (
        "const inboxThreadApi = await Endpoint.createThreadApi(connection);\n"
        "  const inboxStoreApi = await Endpoint.createStoreApi(connection);\n"
        "  const inboxApi = await Endpoint.createInboxApi(connection, inboxThreadApi, inboxStoreApi);"
    ),
    "events": "const eventQueue = await Endpoint.getEventQueue();",
}

_JS_CONNECT = (
    '  await Endpoint.setup("/public");\n'
    "  const connection = await Endpoint.connect(userPrivKey, solutionId, bridgeUrl);"
)

TEMPLATES: dict[str, SetupTemplate] = {
    "typescript": SetupTemplate(
        language="typescript",
        file_name="setup.ts",
        header=(
            'import { Endpoint } from "@simplito/privmx-webendpoint";\n\n'
            "export async function setupPrivmx(userPrivKey: string, solutionId: string, bridgeUrl: string) {"
        ),
        connect=_JS_CONNECT,
        features=_JS_FEATURES,
        footer="  return { connection, {exports} };\n}",
        instructions=(
            "npm install @simplito/privmx-webendpoint",
            "Serve the endpoint assets under /public",
            "Call setupPrivmx() with the user's private key, solution id and Bridge URL",
        ),
    ),
    "javascript": SetupTemplate(
        language="javascript",
        file_name="setup.js",
        header=(
            'import { Endpoint } from "@simplito/privmx-webendpoint";\n\n'
            "export async function setupPrivmx(userPrivKey, solutionId, bridgeUrl) {"
        ),
        connect=_JS_CONNECT,
        features=_JS_FEATURES,
        footer="  return { connection, {exports} };\n}",
        instructions=(
            "npm install @simplito/privmx-webendpoint",
            "Serve the endpoint assets under /public",
            "Call setupPrivmx() with the user's private key, solution id and Bridge URL",
        ),
    ),
    "java": SetupTemplate(
        language="java",
        file_name="PrivmxSetup.java",
        header=(
            "import com.simplito.java.privmx_endpoint_extra.lib.PrivmxEndpoint;\n"
            "import com.simplito.java.privmx_endpoint_extra.lib.PrivmxEndpointContainer;\n"
            "import com.simplito.java.privmx_endpoint_extra.model.Modules;\n"
            "import java.util.Set;\n\n"
            "public class PrivmxSetup {\n"
            "    public static PrivmxEndpoint setup(String certsPath, String userPrivKey, String solutionId, String bridgeUrl) throws Exception {"
        ),
        connect=(
            "        PrivmxEndpointContainer container = new PrivmxEndpointContainer();\n"
            "        container.setCertsPath(certsPath);"
        ),
        features={
            "threads": "Modules.THREAD",
            "stores": "Modules.STORE",
            "inboxes": "Modules.INBOX",
            "events": "Modules.THREAD",
        },
        footer=(
            "        return container.connect(Set.of({exports}), userPrivKey, solutionId, bridgeUrl);\n"
            "    }\n"
            "}"
        ),
        instructions=(
            "Add com.simplito.java:privmx-endpoint-extra to your Gradle or Maven dependencies",
            "Provide a certificate bundle path for TLS",
            "Call PrivmxSetup.setup() and keep the returned endpoint for API calls",
        ),
    ),
    "swift": SetupTemplate(
        language="swift",
        file_name="PrivmxSetup.swift",
        header=(
            "import PrivMXEndpointSwiftExtra\n\n"
            "func setupPrivmx(certsPath: String, userPrivKey: String, solutionId: String, bridgeUrl: String) async throws -> PrivMXEndpoint {"
        ),
        connect=(
            "    let container = PrivMXEndpointContainer()\n"
            "    try container.setCertsPath(to: certsPath)"
        ),
        features={
            "threads": ".thread",
            "stores": ".store",
            "inboxes": ".inbox",
            "events": ".thread",
        },
        footer=(
            "    return try await container.newEndpoint(\n"
            "        enabling: [{exports}], connectingAs: userPrivKey, to: solutionId, on: bridgeUrl)\n"
            "}"
        ),
        instructions=(
            "Add the PrivMXEndpointSwiftExtra package with Swift Package Manager",
            "Bundle a certificate file for TLS",
            "Call setupPrivmx() from an async context",
        ),
    ),
    "csharp": SetupTemplate(
        language="csharp",
        file_name="PrivmxSetup.cs",
        header=(
            "using PrivMX.Endpoint.Extra;\n\n"
            "public static class PrivmxSetup\n"
            "{\n"
            "    public static async Task<PrivMxEndpoint> SetupAsync(string certsPath, string userPrivKey, string solutionId, string bridgeUrl)\n"
            "    {"
        ),
        connect=(
            "        var container = new PrivMxEndpointContainer();\n"
            "        container.SetCertsPath(certsPath);"
        ),
        features={
            "threads": "Modules.Thread",
            "stores": "Modules.Store",
            "inboxes": "Modules.Inbox",
            "events": "Modules.Thread",
        },
        footer=(
            "        return await container.NewEndpointAsync({exports}, userPrivKey, solutionId, bridgeUrl);\n"
            "    }\n"
            "}"
        ),
        instructions=(
            "dotnet add package PrivMX.Endpoint.Extra",
            "Provide a certificate bundle path for TLS",
            "Await PrivmxSetup.SetupAsync() and keep the returned endpoint",
        ),
    ),
}

# Variable names each feature contributes to the returned object (JS family)
_JS_EXPORTS = {"threads": "threadApi", "stores": "storeApi", "inboxes": "inboxApi", "events": "eventQueue"}


class SetupCodeGenerator(CodeGenerator):
    """Renders a ``SetupTemplate`` for the requested features.

    Usage:
        >>> generator = SetupCodeGenerator(TEMPLATES["typescript"])
        >>> result = generator.generate_setup_code(["threads", "stores"])
        >>> result.files[0]["path"]
        'setup.ts'
    """

    def __init__(self, template: SetupTemplate):
        self.template = template
        self.language = template.language

    def generate_setup_code(self, features: list[str]) -> GeneratedCode:
        features = validate_features(features)
        template = self.template

        if template.language in ("typescript", "javascript"):
            body = [template.connect, *(f"  {template.features[f]}" for f in features)]
            exports = ", ".join(_JS_EXPORTS[f] for f in features)
        else:
            # module-flag languages enable features at connect time
            body = [template.connect]
            modules: list[str] = []
            for feature in features:
                if template.features[feature] not in modules:
                    modules.append(template.features[feature])
            exports = ", ".join(modules)

        code = "\n".join([template.header, *body, template.footer.replace("{exports}", exports)]) + "\n"
        return GeneratedCode(
            code=code,
            files=[
                {
                    "path": template.file_name,
                    "content": code,
                    "description": "PrivMX project setup",
                }
            ],
            instructions=list(template.instructions),
        )
