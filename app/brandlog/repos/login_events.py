from app.brandlog.db.models import LoginEvent


class LoginEventRepository:
    def __init__(self, db):
        self.db = db

    def append(self, events: list[LoginEvent]) -> list[LoginEvent]:
        self.db.add_all(events)
        self.db.commit()
        for event in events:
            self.db.refresh(event)
        return events
