from pydantic import BaseModel, ConfigDict, field_validator


class ProbeRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str = ""
    token: str | None = None
    source_ip: str | None = None


class ProbeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    # 依檢查順序排列：db -> cache -> maintenance
    failures: list[str] = []

    @field_validator("failures")
    @classmethod
    def _dedupe(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    @property
    def healthy(self) -> bool:
        return not self.failures

    def body(self) -> str:
        if self.healthy:
            return "OK\n"
        return "unready: " + ",".join(self.failures) + "\n"
