"""
Task Agent Server

FastAPI server exposing the agent to a chat transport.

Endpoints:
- GET /health: Health check
- POST /messages: Answer one user message

Startup:
1. Load .env and configuration
2. Load the team directory
3. Build tracker, completion client, store, pipeline and agent
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from .assistant.agent import Agent
from .common.config import TaskAgentConfig, ensure_directories, load_config
from .common.directory import load_directory
from .common.llm_client import LLMClient
from .common.tracker_client import TrackerClient
from .query.query_processor import QueryProcessor
from .query.time_tracking import TimeTracker
from .storage.json_store import JsonFileStore

logger = logging.getLogger("taskagent.server")

# Global state
config: Optional[TaskAgentConfig] = None
tracker: Optional[TrackerClient] = None
agent: Optional[Agent] = None


def configure_logging() -> None:
    level = os.getenv("TASKAGENT_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_agent(cfg: TaskAgentConfig, tracker_client: TrackerClient) -> Agent:
    """Wire the agent from configuration"""
    directory = load_directory(cfg.departments_path, cfg.members_path)
    llm = LLMClient(
        api_key=cfg.llm.api_key or None,
        model=cfg.llm.model,
        base_url=cfg.llm.base_url or None,
    )
    processor = QueryProcessor(
        tracker_client, directory, cfg.timezone, max_pages=cfg.tracker.max_pages,
    )
    return Agent(
        llm=llm,
        store=JsonFileStore(cfg.storage.path, max_messages=cfg.storage.max_messages),
        processor=processor,
        time_tracker=TimeTracker(tracker_client, cfg.timezone),
        directory=directory,
        timezone=cfg.timezone,
        people_url=tracker_client.people_url(),
        app_url=tracker_client.app_url,
        config=cfg.agent,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup"""
    global config, tracker, agent

    load_dotenv()
    configure_logging()
    logger.info("Starting up...")

    ensure_directories()
    config = load_config()

    missing = config.validate()
    if missing:
        logger.warning("Missing settings: %s", ", ".join(missing))

    tracker = TrackerClient(config.tracker)
    agent = build_agent(config, tracker)
    logger.info("Ready (timezone: %s, model: %s)", config.timezone, config.llm.model)

    yield

    logger.info("Shutting down...")
    tracker.close()


app = FastAPI(
    title="Task Agent",
    description="Chat assistant over ClickUp tasks",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Request/Response Models
# =============================================================================

class MessageRequest(BaseModel):
    """Incoming chat message"""
    user_id: int
    text: str


class MessageResponse(BaseModel):
    reply: str


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "taskagent",
        "initialized": agent is not None,
    }


@app.post("/messages", response_model=MessageResponse)
def post_message(request: MessageRequest):
    if agent is None:
        raise HTTPException(status_code=503, detail="Agent not initialized")
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Empty message")
    return MessageResponse(reply=agent.handle_message(request.user_id, request.text))


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server():
    """Run the task agent server"""
    import uvicorn

    load_dotenv()
    port = load_config().port

    logger.info("Starting server on port %d", port)
    uvicorn.run(
        "taskagent.server:app",
        host="0.0.0.0",
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
