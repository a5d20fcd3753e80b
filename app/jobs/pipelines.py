from app.generation.prompt_loader import PromptSet
from app.jobs.models import DocType, JobType
from app.jobs.pipeline import CollectionStage, FanOutStage, Pipeline, Stage, TurnStage


def tagged_job_descriptions(jds: list[str]) -> str:
    return "\n".join(
        f"<job description {i}>{jd}</job description {i}>" for i, jd in enumerate(jds, 1)
    )


def joined_job_descriptions(jds: list[str]) -> str:
    return "\n\n".join(f"JD{i}:\n\n{jd}" for i, jd in enumerate(jds, 1))


def _application_chain(prompts: PromptSet) -> tuple[Stage, ...]:
    """Analyze the collection's job description, rewrite its resume, write the cover letter."""
    return (
        TurnStage(
            output="analysis",
            message=lambda ctx: f"{prompts.analysis}{ctx.values['jd']}",
            doc_type=DocType.ANALYSIS,
            fresh_conversation=True,
        ),
        TurnStage(
            output="rewrite_resume",
            message=lambda ctx: f"{prompts.compare}{ctx.values['user_resume']}",
            doc_type=DocType.REWRITE_RESUME,
        ),
        TurnStage(
            output="cover_letter",
            message=lambda ctx: prompts.cover_letter,
            doc_type=DocType.COVER_LETTER,
        ),
    )


def build_pipelines(prompts: PromptSet) -> dict[JobType, Pipeline]:
    """Stage lists for every job type."""
    rewrite: Pipeline = (
        CollectionStage(
            user_resume=lambda ctx: ctx.values["user_resume"],
            jd=lambda ctx: ctx.values["jd"],
        ),
        *_application_chain(prompts),
    )

    draft: Pipeline = (
        FanOutStage(
            source="jds",
            output="distilled_jds",
            message=lambda jd: f"{jd}{prompts.tokenize}",
        ),
        TurnStage(
            output="draft_resume",
            message=lambda ctx: (
                f"{tagged_job_descriptions(ctx.lists['distilled_jds'])}\n{prompts.draft}"
            ),
            fresh_conversation=True,
        ),
        CollectionStage(
            user_resume=lambda ctx: ctx.values["draft_resume"],
            jd=lambda ctx: joined_job_descriptions(ctx.lists["distilled_jds"]),
        ),
        *_application_chain(prompts),
    )

    bullet_rewrite: Pipeline = (
        CollectionStage(
            user_resume=lambda ctx: ctx.values["bullet"],
            jd=lambda ctx: ctx.values["jd"],
        ),
        TurnStage(
            output="bullet_rewrite",
            message=lambda ctx: (
                f"<job description>{ctx.values['jd']}</job description>\n"
                f"{prompts.bullet}{ctx.values['bullet']}"
            ),
            doc_type=DocType.BULLET_REWRITE,
            fresh_conversation=True,
        ),
    )

    return {
        JobType.REWRITE: rewrite,
        JobType.DRAFT: draft,
        JobType.BULLET_REWRITE: bullet_rewrite,
    }
