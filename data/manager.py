"""
Local snapshot storage for the project portfolio.
"""

import logging
import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import asdict

from models.data_models import (
    ChannelPerformance, MediaChannel, PlanningData, Poc, Project, ProjectStatus, WeeklyActuals, WeeklyData
)
from business_logic.error_handler import SnapshotError
from business_logic.project_controller import AppState
from .sample_data import seed_portfolio

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def project_to_dict(project: Project) -> Dict[str, Any]:
    data = asdict(project)
    data['status'] = project.status.value
    # JSON object keys are strings
    data['actuals'] = {str(week_id): record for week_id, record in data['actuals'].items()}
    return data


def project_from_dict(data: Dict[str, Any]) -> Project:
    return Project(
        id=data['id'],
        name=data['name'],
        plan=PlanningData(**data['plan']),
        weeks=[WeeklyData(**w) for w in data['weeks']],
        location=data.get('location', ''),
        poc=data.get('poc', ''),
        status=ProjectStatus(data.get('status', ProjectStatus.PLANNING.value)),
        other_spends=data.get('other_spends', 0.0),
        manual_media_budget=data.get('manual_media_budget'),
        media_plan=[MediaChannel(**c) for c in data.get('media_plan', [])],
        actuals={int(k): WeeklyActuals(**v) for k, v in data.get('actuals', {}).items()},
        channel_performance=[ChannelPerformance(**r) for r in data.get('channel_performance', [])],
        is_locked=data.get('is_locked', False)
    )


def state_to_dict(state: AppState) -> Dict[str, Any]:
    return {
        'version': SNAPSHOT_VERSION,
        'saved_at': datetime.now().isoformat(),
        'projects': [project_to_dict(p) for p in state.projects],
        'pocs': [asdict(p) for p in state.pocs]
    }


def state_from_dict(data: Dict[str, Any]) -> AppState:
    return AppState(
        projects=tuple(project_from_dict(p) for p in data['projects']),
        pocs=tuple(Poc(**p) for p in data.get('pocs', []))
    )


class PortfolioStore:
    """
    JSON snapshot store for the application state.

    Keeps a single snapshot file on local disk. Loading without a snapshot
    returns the sample portfolio.
    """

    def __init__(self, snapshot_dir: str = ".estateflow", campaign_start: Optional[date] = None):
        """
        Initialize the PortfolioStore.

        Args:
            snapshot_dir: Directory holding the snapshot file
            campaign_start: Campaign start used when seeding the sample portfolio
        """
        self.snapshot_dir = Path(snapshot_dir)
        self.snapshot_file = self.snapshot_dir / "portfolio.json"
        self.campaign_start = campaign_start

    def snapshot_exists(self) -> bool:
        return self.snapshot_file.exists()

    def save(self, state: AppState) -> Path:
        """
        Write the state to the snapshot file.

        Args:
            state: State to persist

        Returns:
            Path of the written snapshot
        """
        self.snapshot_dir.mkdir(parents=True, exist_ok=True)

        with open(self.snapshot_file, 'w') as f:
            json.dump(state_to_dict(state), f, indent=2)

        logger.info(f"Saved portfolio snapshot with {len(state.projects)} projects to {self.snapshot_file}")
        return self.snapshot_file

    def load(self) -> AppState:
        """
        Load the stored state, or the sample portfolio when nothing is stored.

        Returns:
            AppState

        Raises:
            SnapshotError: If the snapshot exists but cannot be decoded
        """
        if not self.snapshot_exists():
            logger.info("No portfolio snapshot found, loading sample portfolio")
            return seed_portfolio(self.campaign_start)

        try:
            with open(self.snapshot_file, 'r') as f:
                data = json.load(f)
            state = state_from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"Invalid portfolio snapshot {self.snapshot_file}: {str(e)}") from e

        logger.info(f"Loaded portfolio snapshot with {len(state.projects)} projects")
        return state

    def clear(self):
        """Delete the snapshot file if present."""
        if self.snapshot_exists():
            self.snapshot_file.unlink()
            logger.info("Portfolio snapshot cleared")
