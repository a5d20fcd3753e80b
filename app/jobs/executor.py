from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from app.database.repositories.document_repository import DocumentRepository
from app.generation.conversation import ConversationDriver, strip_code_fences
from app.jobs.models import DocType, DocumentRef
from app.jobs.pipeline import (
    CollectionStage,
    FanOutStage,
    Pipeline,
    PipelineContext,
    Stage,
    TurnStage,
)
from app.logging.logger import Log


def collection_name(label: str, now: datetime | None = None) -> str:
    """Display name: '<Job type> - YYYY-MM-DD @ HH:MM:SS'."""
    return f"{label} - {(now or datetime.now()).strftime('%Y-%m-%d @ %H:%M:%S')}"


class PipelineExecutor:
    """Interprets a pipeline's stages in order against one PipelineContext.

    Any exception aborts the run. Documents created before the failure stay
    in place.
    """

    def __init__(
        self,
        driver: ConversationDriver,
        doc_repo: DocumentRepository,
        fan_out_max_workers: int = 3,
    ) -> None:
        self._driver = driver
        self._doc_repo = doc_repo
        self._fan_out_max_workers = max(1, fan_out_max_workers)

    def execute(self, pipeline: Pipeline, context: PipelineContext) -> PipelineContext:
        for index, stage in enumerate(pipeline, 1):
            Log.info(
                f"Job {context.job_id}: stage {index}/{len(pipeline)} "
                f"{type(stage).__name__}"
            )
            self._run_stage(stage, context)
        return context

    def _run_stage(self, stage: Stage, context: PipelineContext) -> None:
        if isinstance(stage, CollectionStage):
            self._create_collection(stage, context)
        elif isinstance(stage, TurnStage):
            self._run_turn(stage, context)
        elif isinstance(stage, FanOutStage):
            self._run_fan_out(stage, context)
        else:
            raise TypeError(f"Unknown pipeline stage: {stage!r}")

    def _create_collection(self, stage: CollectionStage, context: PipelineContext) -> None:
        user_resume = stage.user_resume(context)
        jd = stage.jd(context)
        context.collection = self._doc_repo.create_collection(
            collection_name(context.job_type.label), user_resume, jd
        )
        context.values["user_resume"] = user_resume
        context.values["jd"] = jd
        self._persist(context, DocType.USER_RESUME, user_resume)
        self._persist(context, DocType.JD, jd)
        Log.info(f"Job {context.job_id}: created collection {context.collection.id}")

    def _run_turn(self, stage: TurnStage, context: PipelineContext) -> None:
        if stage.fresh_conversation or context.conversation is None:
            context.conversation = self._driver.start()
        reply = self._driver.run_turn(context.conversation, stage.message(context))
        context.values[stage.output] = reply
        if stage.doc_type is not None:
            self._persist(context, stage.doc_type, reply)

    def _run_fan_out(self, stage: FanOutStage, context: PipelineContext) -> None:
        items = context.lists.get(stage.source, [])
        if not items:
            raise ValueError(f"PipelineContext.lists['{stage.source}'] must not be empty")
        workers = min(len(items), self._fan_out_max_workers)
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=f"{context.job_id[:8]}-fan-out"
        ) as pool:
            futures = [
                pool.submit(self._single_turn, context.job_id, stage.message(item))
                for item in items
            ]
            try:
                context.lists[stage.output] = [future.result() for future in futures]
            except Exception:
                for future in futures:
                    future.cancel()
                raise
        Log.info(f"Job {context.job_id}: {stage.output} produced {len(items)} replies")

    def _single_turn(self, job_id: str, message: str) -> str:
        with Log.job_context(job_id):
            return self._driver.run_turn(self._driver.start(), message)

    def _persist(self, context: PipelineContext, doc_type: DocType, content: str) -> None:
        if context.collection is None:
            raise ValueError(
                f"PipelineContext.collection must be set before persisting {doc_type.value}"
            )
        document = self._doc_repo.create_document(
            context.user_id, doc_type.value, strip_code_fences(content), context.collection.id
        )
        context.documents.append(DocumentRef(id=document.id, doc_type=doc_type))
