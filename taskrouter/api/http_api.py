"""
HTTP API adapter for the taskrouter orchestrator.

Architectural role:
- Expose the task-processing, agent-info, and chat endpoints.
- Enforce adapter-level input validation.
- Delegate prompting/classification to `PromptOrchestrator.handle`.
- Normalize results to the public JSON response contract.

Endpoint responsibilities:
- `POST /process`: validate a task request and run it.
- `GET /agents`: describe the orchestrator and its registered child agents.
- `POST /agents`: register or replace a child agent descriptor at runtime.
- `POST /chat`: wrap a single chat message into a `chat` task.

Input validation behavior:
- Non-JSON body -> HTTP 400.
- `/process` without `taskType` or `parameters` -> HTTP 400.
- `/chat` without `message` -> HTTP 400.
- `/agents` with a blank name -> HTTP 400.

CORS:
- Any origin; `GET`, `POST`, `OPTIONS`; `Content-Type` header.

Error handling strategy:
- Validation failures return structured 400 JSON responses.
- Orchestration failures arrive as failed results (`success: false`); `/process`
  maps them to 500, `/chat` always answers 200 with the result body.
- Unexpected handler exceptions return 500 with `success: false`.

Side effects:
- Builds one module-level `PromptOrchestrator` with the default registry.
- Emits request debug logs only when `DEBUG == "true"`.
"""

from dotenv import load_dotenv

load_dotenv()

import os
import time
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import taskrouter
from taskrouter.core.engine import ORCHESTRATOR_ID, PromptOrchestrator
from taskrouter.core.errors import ValidationError
from taskrouter.core.types import CapabilityDescriptor, TaskContext, TaskRequest
from taskrouter.llm.provider_config import MODEL_NAME
from taskrouter.llm.service import generate_reply


logger = logging.getLogger(__name__)

# Sensitive request/response debug logging is opt-in.
DEBUG = os.getenv("DEBUG") == "true"

ORCHESTRATOR_CAPABILITIES = [
    "Task orchestration",
    "Multi-agent coordination",
    "Context management",
    "Dynamic task delegation",
]

app = FastAPI(title="taskrouter", version=taskrouter.__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

orchestrator = PromptOrchestrator(complete=generate_reply)


# ============================================================
# Request Schemas
# ============================================================

class AgentDescriptorBody(BaseModel):
    """Runtime registration payload for `POST /agents`."""
    name: str
    description: str = ""
    capabilities: list[str] = []
    systemPrompt: str = ""


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _internal_error(err: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": str(err) or "Internal server error"},
    )


async def _read_json(request: Request):
    """Decode the request body; `None` signals an unreadable body."""
    try:
        return await request.json()
    except ValueError:
        return None


# ============================================================
# Task Processing
# ============================================================

@app.post("/process")
async def process_agent_request(request: Request):
    """
    Run one task through the orchestrator.

    Response contract:
    - 200 with the result body when `success` is true.
    - 500 with the result body when the completion call failed.
    - 400 for malformed task requests.
    """
    body = await _read_json(request)

    if DEBUG:
        logger.info("Incoming task request: %r", body)

    try:
        task_request = TaskRequest.from_payload(body)
    except ValidationError as err:
        return _error(400, str(err))

    try:
        result = await orchestrator.handle(task_request)
    except Exception as err:
        logger.exception("Error processing request")
        return _internal_error(err)

    if DEBUG:
        logger.info("Task result: %r", result)

    return JSONResponse(
        status_code=200 if result.succeeded else 500,
        content=result.to_dict(),
    )


# ============================================================
# Agent Info / Registration
# ============================================================

@app.get("/agents")
def get_agent_info():
    """Describe the orchestrator, its model, and the registered child agents."""
    return {
        "name": ORCHESTRATOR_ID,
        "version": taskrouter.__version__,
        "model": MODEL_NAME,
        "childAgents": [d.to_dict() for d in orchestrator.descriptors()],
        "capabilities": ORCHESTRATOR_CAPABILITIES,
    }


@app.post("/agents", status_code=201)
def register_agent(body: AgentDescriptorBody):
    """Register or replace a child agent; takes effect on the next request."""
    try:
        descriptor = CapabilityDescriptor.from_payload(body.model_dump())
        orchestrator.register(descriptor)
    except ValidationError as err:
        return _error(400, str(err))

    return descriptor.to_dict()


# ============================================================
# Chat
# ============================================================

@app.post("/chat")
async def chat(request: Request):
    """
    Single-message chat entrypoint.

    The message becomes `parameters.message` of a `chat` task. A session id is
    generated when the caller does not supply one.
    """
    body = await _read_json(request)
    if not isinstance(body, dict):
        return _error(400, "Message is required")

    message = body.get("message")
    if not message:
        return _error(400, "Message is required")

    try:
        context = TaskContext.from_payload({
            "sessionId": body.get("sessionId") or f"session_{int(time.time() * 1000)}",
            "conversationHistory": body.get("conversationHistory") or [],
        })
    except ValidationError as err:
        return _error(400, str(err))

    task_request = TaskRequest(
        kind="chat",
        parameters={"message": message},
        context=context,
    )

    try:
        result = await orchestrator.handle(task_request)
    except Exception as err:
        logger.exception("Chat error")
        return _internal_error(err)

    return result.to_dict()
