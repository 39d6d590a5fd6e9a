from dataclasses import dataclass


@dataclass(frozen=True)
class AttendeeRecord:
    identity_number: str
    name: str
    registration_number: str
    source_sheet: str

    @property
    def has_registration(self) -> bool:
        return bool(self.registration_number)

    def __repr__(self):
        return f"<Attendee {self.name} ({self.source_sheet})>"
