"""Job layer package for BLAST job lifecycle coordination."""

from .analysis import ResultAnalysis, job_analyze_results
from .coordinator import BlastJobCoordinator, SnapshotListener
from .history import BlastSearchHistory, SearchHistoryEntry
from .interfaces import (
	POLLER_STATE_IDLE,
	POLLER_STATE_POLLING,
	POLLER_STATE_STOPPED,
	SERVER_STATUS_OFFLINE,
	SERVER_STATUS_ONLINE,
	SERVER_STATUS_UNKNOWN,
	CoordinatorSnapshot,
	JobSubmitterPort,
	PollErrorCallback,
	ResultFetcherPort,
	ServerHealthPort,
	StatusCallback,
	StatusPollerPort,
)
from .poller import BlastStatusPoller
from .result_fetcher import BlastResultFetcher
from .submitter import BlastJobSubmitter

__all__ = [
	"BlastJobCoordinator",
	"BlastJobSubmitter",
	"BlastResultFetcher",
	"BlastSearchHistory",
	"BlastStatusPoller",
	"CoordinatorSnapshot",
	"JobSubmitterPort",
	"POLLER_STATE_IDLE",
	"POLLER_STATE_POLLING",
	"POLLER_STATE_STOPPED",
	"SERVER_STATUS_OFFLINE",
	"SERVER_STATUS_ONLINE",
	"SERVER_STATUS_UNKNOWN",
	"PollErrorCallback",
	"ResultAnalysis",
	"ResultFetcherPort",
	"SearchHistoryEntry",
	"ServerHealthPort",
	"SnapshotListener",
	"StatusCallback",
	"StatusPollerPort",
	"job_analyze_results",
]
