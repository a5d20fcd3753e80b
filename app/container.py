from dataclasses import dataclass

from app.config.settings import Settings
from app.credits.ledger import CreditLedger
from app.database.repositories.document_repository import DocumentRepository
from app.database.repositories.job_repository import JobRepository
from app.database.repositories.user_repository import UserRepository
from app.generation.client_base import BaseChatClient
from app.generation.conversation import ConversationDriver
from app.generation.factory import ChatClientFactory
from app.generation.prompt_loader import load_prompt_set
from app.jobs.executor import PipelineExecutor
from app.jobs.job_runner import JobRunner, credit_costs
from app.jobs.pipelines import build_pipelines
from app.jobs.scheduler import JobScheduler
from app.jobs.service import JobService


@dataclass
class Container:
    """Long-lived service objects shared by the HTTP routes."""

    settings: Settings
    user_repo: UserRepository
    job_repo: JobRepository
    doc_repo: DocumentRepository
    ledger: CreditLedger
    scheduler: JobScheduler
    job_service: JobService


def build_container(
    settings: Settings,
    client: BaseChatClient | None = None,
    user_repo: UserRepository | None = None,
    job_repo: JobRepository | None = None,
    doc_repo: DocumentRepository | None = None,
) -> Container:
    """Build the service graph. Repositories and the chat client can be swapped for tests."""
    user_repo = user_repo or UserRepository()
    job_repo = job_repo or JobRepository()
    doc_repo = doc_repo or DocumentRepository()
    prompts = load_prompt_set(settings.prompts_dir)
    driver = ConversationDriver(
        client=client or ChatClientFactory.create(settings),
        model=settings.openai_model_name,
        system_prompt=prompts.system_prompt,
    )
    ledger = CreditLedger(user_repo)
    runner = JobRunner(
        pipelines=build_pipelines(prompts),
        executor=PipelineExecutor(driver, doc_repo, settings.fan_out_max_workers),
        ledger=ledger,
        job_repo=job_repo,
        costs=credit_costs(settings),
    )
    scheduler = JobScheduler.create(runner, job_repo)
    return Container(
        settings=settings,
        user_repo=user_repo,
        job_repo=job_repo,
        doc_repo=doc_repo,
        ledger=ledger,
        scheduler=scheduler,
        job_service=JobService(scheduler, ledger, job_repo),
    )
