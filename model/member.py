# Fields a member may edit on their own profile
profile_fields = ["name", "phone", "github", "portfolio", "interests", "goals", "availability", "avatar", "bio"]

# Fields that must never leave the server
private_fields = ["password"]

EXPERIENCE_LEVELS = ["beginner", "intermediate", "advanced"]


class Member:
    def __init__(self):
        self.id = None
        self.name = ""
        self.email = ""
        self.phone = ""
        self.github = None
        self.portfolio = None
        self.interests = []
        self.experience = "beginner"
        self.goals = ""
        self.role = "student"
        self.availability = ""
        self.bio = ""
        self.points = 0
        self.badges = 0
        self.avatar = ""
        self.username = None
        self.password = None
        self.approved_by = None
        self.joined_at = None
        self.credentials_updated = None

    @classmethod
    def deserialize(cls, d):
        m = Member()
        m.id = d.get('id')
        m.name = d.get('name', '')
        m.email = d.get('email', '')
        m.phone = d.get('phone', '')
        m.github = d.get('github')
        m.portfolio = d.get('portfolio')
        m.interests = d.get('interests', [])
        m.experience = d.get('experience', 'beginner')
        m.goals = d.get('goals', '')
        m.role = d.get('role', 'student')
        m.availability = d.get('availability', '')
        m.bio = d.get('bio', '')
        m.points = d.get('points', 0) or 0
        m.badges = d.get('badges', 0) or 0
        m.avatar = d.get('avatar', '')
        m.username = d.get('username')
        m.password = d.get('password')
        m.approved_by = d.get('approvedBy')
        m.joined_at = d.get('joinedAt')
        m.credentials_updated = d.get('credentialsUpdated')
        return m

    def serialize(self):
        # Stored documents use the camelCase keys the frontend already reads
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "github": self.github,
            "portfolio": self.portfolio,
            "interests": self.interests,
            "experience": self.experience,
            "goals": self.goals,
            "role": self.role,
            "availability": self.availability,
            "bio": self.bio,
            "points": self.points,
            "badges": self.badges,
            "avatar": self.avatar,
            "username": self.username,
            "password": self.password,
            "approvedBy": self.approved_by,
            "joinedAt": self.joined_at,
            "credentialsUpdated": self.credentials_updated,
        }

    def public_profile(self):
        d = self.serialize()
        for field in private_fields:
            d.pop(field, None)
        return d

    def update_from_profile(self, d):
        for field in profile_fields:
            if field in d:
                setattr(self, field, d[field])

    def __str__(self):
        return f"Member(id={self.id}, name={self.name}, role={self.role})"


def strip_private_fields(d):
    """Raw member dict without credentials, for list endpoints"""
    return {k: v for k, v in d.items() if k not in private_fields}
