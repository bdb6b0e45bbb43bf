from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .result import DerivativeErrorKind


class Severity(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Channel(str, Enum):
    LOG = "log"    # for the logging system
    USER = "user"  # shown to whoever triggered the run


class OutcomeMessage(BaseModel):
    text: str
    severity: Severity = Severity.INFO
    channel: Channel = Channel.USER


class OutcomeReport(BaseModel):
    """Result of one derivative run. Messages accumulate; nothing is overwritten."""
    success: bool = True
    messages: List[OutcomeMessage] = Field(default_factory=list)
    error_kind: Optional[DerivativeErrorKind] = None

    def add(
        self,
        text: str,
        severity: Severity = Severity.INFO,
        channel: Channel = Channel.USER
    ) -> "OutcomeReport":
        self.messages.append(OutcomeMessage(text=text, severity=severity, channel=channel))
        return self

    def fail(
        self,
        text: str,
        channel: Channel = Channel.LOG,
        kind: Optional[DerivativeErrorKind] = None
    ) -> "OutcomeReport":
        self.success = False
        self.error_kind = kind
        return self.add(text, severity=Severity.ERROR, channel=channel)


class PageOutcome(BaseModel):
    """Per-object aggregate; partial success stays visible per derivative."""
    pid: str
    reports: Dict[str, OutcomeReport] = Field(default_factory=dict)

    @property
    def success(self) -> bool:
        return all(report.success for report in self.reports.values())

    @property
    def messages(self) -> List[OutcomeMessage]:
        return [message for report in self.reports.values() for message in report.messages]

    def failed_dsids(self) -> List[str]:
        return [dsid for dsid, report in self.reports.items() if not report.success]
