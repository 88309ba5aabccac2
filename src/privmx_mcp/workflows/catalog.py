"""Built-in PrivMX workflow catalog."""

from privmx_mcp.workflows.models import WorkflowDefinition, WorkflowStep

ALL_LANGUAGES = ["typescript", "javascript", "java", "kotlin", "swift", "csharp"]


def _setup_steps() -> list[WorkflowStep]:
    return [
        WorkflowStep(
            id="setup-endpoint",
            name="Initialize Endpoint",
            description="Set up PrivMX endpoint",
            api_method="Endpoint.setup",
            parameters={"publicPath": "string"},
            example='await Endpoint.setup("/public");',
        ),
        WorkflowStep(
            id="establish-connection",
            name="Connect to Bridge",
            description="Establish connection to PrivMX Bridge",
            api_method="Endpoint.connect",
            parameters={"userPrivKey": "string", "solutionId": "string", "bridgeUrl": "string"},
            prerequisites=["setup-endpoint"],
            example="const connection = await Endpoint.connect(userPrivKey, solutionId, bridgeUrl);",
        ),
    ]


def messaging_workflow() -> WorkflowDefinition:
    return WorkflowDefinition(
        id="secure-messaging",
        name="Secure Messaging Application",
        description="Build a complete secure messaging app with PrivMX: encrypted chat threads and messages",
        estimated_time="30-45 minutes",
        difficulty="intermediate",
        tags=["messaging", "message", "chat", "threads", "real-time"],
        languages=list(ALL_LANGUAGES),
        steps=[
            *_setup_steps(),
            WorkflowStep(
                id="create-thread-api",
                name="Create Thread API",
                description="Initialize Thread API instance",
                api_method="Endpoint.createThreadApi",
                parameters={"connection": "Connection"},
                prerequisites=["establish-connection"],
                example="const threadApi = await Endpoint.createThreadApi(connection);",
            ),
            WorkflowStep(
                id="create-thread",
                name="Create Secure Thread",
                description="Create a new thread for messaging",
                api_method="ThreadApi.createThread",
                parameters={"contextId": "string", "users": "UserWithPubKey[]", "managers": "UserWithPubKey[]"},
                prerequisites=["create-thread-api"],
                example="const threadId = await threadApi.createThread(contextId, users, managers, publicMeta, privateMeta);",
            ),
            WorkflowStep(
                id="send-message",
                name="Send Message to Thread",
                description="Send an encrypted message to the thread",
                api_method="ThreadApi.sendMessage",
                parameters={"threadId": "string", "publicMeta": "Uint8Array", "privateMeta": "Uint8Array", "data": "Uint8Array"},
                prerequisites=["create-thread"],
                example="await threadApi.sendMessage(threadId, publicMeta, privateMeta, data);",
            ),
            WorkflowStep(
                id="setup-events",
                name="Set up Event Listeners",
                description="Listen for real-time message events",
                api_method="EventQueue.addEventListener",
                parameters={"eventType": "string", "handler": "function"},
                prerequisites=["create-thread"],
                example='eventQueue.addEventListener("threadNewMessage", handleMessage);',
            ),
        ],
    )


def file_storage_workflow() -> WorkflowDefinition:
    return WorkflowDefinition(
        id="file-storage",
        name="Secure File Storage",
        description="Build a secure file storage system with encrypted file upload and download",
        estimated_time="20-30 minutes",
        difficulty="beginner",
        tags=["files", "file", "storage", "store", "upload", "encryption"],
        languages=list(ALL_LANGUAGES),
        steps=[
            *_setup_steps(),
            WorkflowStep(
                id="create-store-api",
                name="Create Store API",
                description="Initialize Store API instance",
                api_method="Endpoint.createStoreApi",
                parameters={"connection": "Connection"},
                prerequisites=["establish-connection"],
                example="const storeApi = await Endpoint.createStoreApi(connection);",
            ),
            WorkflowStep(
                id="create-store",
                name="Create Secure Store",
                description="Create an encrypted store for files",
                api_method="StoreApi.createStore",
                parameters={"contextId": "string", "users": "UserWithPubKey[]", "managers": "UserWithPubKey[]"},
                prerequisites=["create-store-api"],
            ),
            WorkflowStep(
                id="create-file",
                name="Create File",
                description="Create a file in the store and open it for upload",
                api_method="StoreApi.createFile",
                parameters={"storeId": "string", "size": "number"},
                prerequisites=["create-store"],
            ),
            WorkflowStep(
                id="write-file",
                name="Upload File Content",
                description="Write file content chunks to the open file",
                api_method="StoreApi.writeToFile",
                parameters={"fileHandle": "number", "dataChunk": "Uint8Array"},
                prerequisites=["create-file"],
            ),
            WorkflowStep(
                id="close-file",
                name="Finish Upload",
                description="Close the file handle to finish the upload",
                api_method="StoreApi.closeFile",
                parameters={"fileHandle": "number"},
                prerequisites=["write-file"],
            ),
        ],
    )


def inbox_workflow() -> WorkflowDefinition:
    return WorkflowDefinition(
        id="inbox-system",
        name="Inbox Notification System",
        description="Build an inbox for notifications, forms and feedback submissions",
        estimated_time="25-35 minutes",
        difficulty="intermediate",
        tags=["inbox", "notifications", "notification", "feedback", "forms"],
        languages=list(ALL_LANGUAGES),
        steps=[
            *_setup_steps(),
            WorkflowStep(
                id="create-thread-api",
                name="Create Thread API",
                description="Initialize Thread API instance required by inboxes",
                api_method="Endpoint.createThreadApi",
                parameters={"connection": "Connection"},
                prerequisites=["establish-connection"],
            ),
            WorkflowStep(
                id="create-store-api",
                name="Create Store API",
                description="Initialize Store API instance required by inboxes",
                api_method="Endpoint.createStoreApi",
                parameters={"connection": "Connection"},
                prerequisites=["establish-connection"],
            ),
            WorkflowStep(
                id="create-inbox-api",
                name="Create Inbox API",
                description="Initialize Inbox API instance",
                api_method="Endpoint.createInboxApi",
                parameters={"connection": "Connection", "threadApi": "ThreadApi", "storeApi": "StoreApi"},
                prerequisites=["create-thread-api", "create-store-api"],
                example="const inboxApi = await Endpoint.createInboxApi(connection, threadApi, storeApi);",
            ),
            WorkflowStep(
                id="create-inbox",
                name="Create Inbox",
                description="Create an inbox that accepts entries",
                api_method="InboxApi.createInbox",
                parameters={"contextId": "string", "users": "UserWithPubKey[]", "managers": "UserWithPubKey[]"},
                prerequisites=["create-inbox-api"],
            ),
            WorkflowStep(
                id="list-entries",
                name="Read Inbox Entries",
                description="List notifications received by the inbox",
                api_method="InboxApi.listEntries",
                parameters={"inboxId": "string", "pagingQuery": "PagingQuery"},
                prerequisites=["create-inbox"],
            ),
        ],
    )


def event_handling_workflow() -> WorkflowDefinition:
    return WorkflowDefinition(
        id="event-handling",
        name="Real-time Event Handling",
        description="Set up real-time event processing and listeners",
        estimated_time="15-25 minutes",
        difficulty="beginner",
        tags=["events", "event", "real-time", "realtime", "listen", "listener"],
        languages=list(ALL_LANGUAGES),
        steps=[
            *_setup_steps(),
            WorkflowStep(
                id="get-event-queue",
                name="Get Event Queue",
                description="Get the global event queue",
                api_method="Endpoint.getEventQueue",
                prerequisites=["establish-connection"],
                example="const eventQueue = await Endpoint.getEventQueue();",
            ),
            WorkflowStep(
                id="add-listener",
                name="Add Event Listener",
                description="Register a handler for an event type",
                api_method="EventQueue.addEventListener",
                parameters={"eventType": "string", "handler": "function"},
                prerequisites=["get-event-queue"],
                example='eventQueue.addEventListener("threadNewMessage", handleMessage);',
            ),
        ],
    )


def default_workflows() -> list[WorkflowDefinition]:
    """Built-in workflows, in declaration order."""
    return [
        messaging_workflow(),
        file_storage_workflow(),
        inbox_workflow(),
        event_handling_workflow(),
    ]
