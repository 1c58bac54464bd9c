from common.exceptions import ValidationError
from common.utils.validators import require_choice, require_email, sanitize_string

REGISTRATION_TYPES = ["individual", "team"]
GENDERS = ["male", "female", "other"]
MAX_MEMBERS = 4
MIN_TEAM_MEMBERS = 2

# Exported one row per member
EXPORT_HEADERS = ["ID", "Type", "Team Name", "Member Name", "Email", "Phone", "Gender", "GitHub", "Portfolio", "Registered At"]

# Import rows: type, team name, then one member
IMPORT_COLUMNS = ["type", "teamName", "name", "email", "phone", "gender", "github", "portfolio"]


class RegistrationMember:
    def __init__(self):
        self.name = ''
        self.email = ''
        self.phone = ''
        self.gender = 'male'
        self.github = ''
        self.portfolio = ''

    @classmethod
    def deserialize(cls, d):
        m = RegistrationMember()
        m.name = sanitize_string(d.get('name'))
        m.email = sanitize_string(d.get('email'))
        m.phone = sanitize_string(d.get('phone'))
        m.gender = sanitize_string(d.get('gender')) or 'male'
        m.github = sanitize_string(d.get('github'))
        m.portfolio = sanitize_string(d.get('portfolio'))
        return m

    def validate(self, position):
        if len(self.name) < 2:
            raise ValidationError(f"Member {position}: name is required")
        try:
            self.email = require_email(self.email)
        except ValidationError:
            raise ValidationError(f"Member {position}: invalid email address")
        if len(self.phone) < 10:
            raise ValidationError(f"Member {position}: valid phone number required")
        require_choice(self.gender, GENDERS, "gender")

    def serialize(self):
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "gender": self.gender,
            "github": self.github,
            "portfolio": self.portfolio,
        }


class HackathonRegistration:
    def __init__(self):
        self.id = None
        self.type = 'individual'
        self.team_name = None
        self.members = []
        self.created_at = None

    @classmethod
    def deserialize(cls, d):
        r = HackathonRegistration()
        r.id = d.get('id')
        r.type = d.get('type', 'individual')
        r.team_name = sanitize_string(d.get('teamName')) or None
        r.members = [RegistrationMember.deserialize(m) for m in d.get('members', []) if isinstance(m, dict)]
        r.created_at = d.get('createdAt')
        return r

    def validate(self):
        require_choice(self.type, REGISTRATION_TYPES, "type")
        if not self.members:
            raise ValidationError("At least one member is required")
        if len(self.members) > MAX_MEMBERS:
            raise ValidationError(f"Maximum {MAX_MEMBERS} members allowed")
        if self.type == "team" and (not self.team_name or len(self.members) < MIN_TEAM_MEMBERS):
            raise ValidationError("Team name and at least 2 members are required for team registration")
        for position, member in enumerate(self.members, start=1):
            member.validate(position)

    def lead_member(self):
        return self.members[0] if self.members else None

    def serialize(self):
        d = {
            "type": self.type,
            "members": [m.serialize() for m in self.members],
            "createdAt": self.created_at,
        }
        if self.team_name:
            d["teamName"] = self.team_name
        return d
