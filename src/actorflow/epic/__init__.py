"""Request epic: composition of the dispatch and cancel pipelines."""

from actorflow.epic.epic import RequestEpic, create_request_epic
from actorflow.epic.pipelines import CancelPipeline, DispatchPipeline
from actorflow.epic.stream import ActorStream, collect, from_iterable

__all__ = [
    "RequestEpic",
    "create_request_epic",
    "DispatchPipeline",
    "CancelPipeline",
    "ActorStream",
    "collect",
    "from_iterable",
]
