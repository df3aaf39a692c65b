from typing import Dict


class RosterError(Exception):
    """Base class for every outcome the roster core reports to callers."""
    code = "roster_error"
    status_code = 400

    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'error': self.message, 'code': self.code}


class ValidationError(RosterError):
    """Invalid match specification."""
    code = "validation_error"

    def __init__(self, fields: Dict[str, str]):
        self.fields = dict(fields)
        listed = ", ".join(f"{name}: {msg}" for name, msg in self.fields.items())
        super().__init__(f"Invalid match: {listed}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['fields'] = self.fields
        return data


class InvalidIdentity(RosterError):
    """A participant needs a name or an external id."""
    code = "invalid_identity"


class MatchNotFound(RosterError):
    """Match not found."""
    code = "not_found"
    status_code = 404

    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(f"Match {match_id} not found")


class NotJoined(RosterError):
    """Player is not part of this match."""
    code = "not_joined"
    status_code = 404


class MatchCancelled(RosterError):
    """Match is cancelled."""
    code = "match_cancelled"
    status_code = 409


class MatchFull(RosterError):
    """Match is full."""
    code = "match_full"
    status_code = 409


class AlreadyJoined(RosterError):
    """Player already joined this match."""
    code = "already_joined"
    status_code = 409


class InvalidTransition(RosterError):
    """Match cannot make that transition."""
    code = "invalid_transition"
    status_code = 409
