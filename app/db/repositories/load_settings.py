"""Load settings and calibration day repositories."""

from typing import Optional

from sqlmodel import Session, select

from app.models.calibration_day import CalibrationDayRecord
from app.models.load_settings import LoadSettings


class LoadSettingsRepository:
    """Repository for the single LoadSettings row."""

    def __init__(self, session: Session):
        self.session = session

    def get(self) -> Optional[LoadSettings]:
        statement = select(LoadSettings).order_by(LoadSettings.id)
        return self.session.exec(statement).first()

    def create(self, settings: LoadSettings) -> LoadSettings:
        self.session.add(settings)
        self.session.commit()
        self.session.refresh(settings)
        return settings

    def update(self, settings: LoadSettings) -> LoadSettings:
        self.session.add(settings)
        self.session.commit()
        self.session.refresh(settings)
        return settings

    def get_or_create(self) -> LoadSettings:
        """Get the settings row, or create a default one."""
        existing = self.get()
        if existing:
            return existing
        return self.create(LoadSettings())


class CalibrationDayRepository:
    """Repository for pending calibration days."""

    def __init__(self, session: Session):
        self.session = session

    def get_all(self) -> list[CalibrationDayRecord]:
        statement = select(CalibrationDayRecord).order_by(CalibrationDayRecord.position)
        return list(self.session.exec(statement).all())

    def replace_all(self, records: list[CalibrationDayRecord]) -> list[CalibrationDayRecord]:
        """Swap the stored run for *records* in one transaction."""
        for existing in self.get_all():
            self.session.delete(existing)
        for record in records:
            self.session.add(record)
        self.session.commit()
        for record in records:
            self.session.refresh(record)
        return records
