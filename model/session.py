from datetime import date, datetime

SESSION_STATUSES = ["upcoming", "archived"]


class Session:
    def __init__(self):
        self.id = None
        self.title = ''
        self.date = ''  # YYYY-MM-DD
        self.weekday = ''
        self.topics = []
        self.description = ''
        self.duration = '90 minutes'
        self.location = 'Online'
        self.status = None
        self.created_by = None
        self.created_at = None
        self.updated_at = None
        self.archived_at = None

    @classmethod
    def deserialize(cls, d):
        s = Session()
        s.id = d.get('id')
        s.title = d.get('title', '')
        s.date = d.get('date', '')
        s.weekday = d.get('weekday') or weekday_for(s.date)
        s.topics = d.get('topics', [])
        s.description = d.get('description', '')
        s.duration = d.get('duration', '90 minutes')
        s.location = d.get('location', 'Online')
        s.status = d.get('status')
        s.created_by = d.get('createdBy')
        s.created_at = d.get('createdAt')
        s.updated_at = d.get('updatedAt')
        s.archived_at = d.get('archivedAt')
        return s

    def serialize(self):
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "weekday": self.weekday,
            "topics": self.topics,
            "description": self.description,
            "duration": self.duration,
            "location": self.location,
            "status": self.status,
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "archivedAt": self.archived_at,
        }

    def effective_status(self, today=None):
        """Stored status wins; otherwise sessions dated before today are archived"""
        if self.status:
            return self.status
        today_key = (today or date.today()).isoformat()
        return "archived" if self.date < today_key else "upcoming"


def parse_session_date(value):
    """Validate a YYYY-MM-DD string, returning it unchanged"""
    datetime.strptime(value, "%Y-%m-%d")
    return value


def weekday_for(date_key):
    try:
        return datetime.strptime(date_key, "%Y-%m-%d").strftime("%A")
    except (TypeError, ValueError):
        return ''


def normalize_topics(topics):
    """Topics arrive either as a list or as the admin form's comma separated string"""
    if isinstance(topics, str):
        return [t.strip() for t in topics.split(",") if t.strip()]
    return [str(t).strip() for t in (topics or []) if str(t).strip()]
