from pydantic import BaseModel, Field


class RewriteRequest(BaseModel):
    user_resume: str | None = None
    jd: str | None = None


class DraftRequest(BaseModel):
    jd1: str | None = None
    jd2: str | None = None
    jd3: str | None = None
    jds: list[str] | None = None

    def job_descriptions(self) -> tuple[str, ...]:
        """Sent job descriptions, blanks included so validation can reject them."""
        if self.jds is not None:
            return tuple(self.jds)
        return tuple(jd for jd in (self.jd1, self.jd2, self.jd3) if jd is not None)


class BulletRewriteRequest(BaseModel):
    bullet: str | None = None
    jd: str | None = None


class UseCreditsRequest(BaseModel):
    amount: int = Field(gt=0)


class AddCreditsRequest(BaseModel):
    userId: int
    amount: int = Field(gt=0)
