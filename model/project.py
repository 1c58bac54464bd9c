PROJECT_STATUSES = ["active", "recruiting", "completed"]

# Only these can be changed through PATCH /api/projects/<id>
updatable_fields = [
    "title",
    "description",
    "status",
    "tech",
    "githubUrl",
    "demoUrl",
    "docsUrl",
    "chatUrl",
    "latestUpdate",
]

INTEREST_STATUSES = ["pending", "approved", "rejected"]


class Project:
    def __init__(self):
        self.id = None
        self.title = ''
        self.description = ''
        self.tech = []
        self.status = 'recruiting'
        self.owner = ''
        self.owner_id = None
        self.github_url = None
        self.demo_url = None
        self.docs_url = None
        self.chat_url = None
        self.latest_update = None
        self.created_at = None
        self.updated_at = None

    @classmethod
    def deserialize(cls, d):
        p = Project()
        p.id = d.get('id')
        p.title = d.get('title', '')
        p.description = d.get('description', '')
        p.tech = d.get('tech', [])
        p.status = d.get('status', 'recruiting')
        p.owner = d.get('owner', '')
        p.owner_id = d.get('ownerId')
        p.github_url = d.get('githubUrl')
        p.demo_url = d.get('demoUrl')
        p.docs_url = d.get('docsUrl')
        p.chat_url = d.get('chatUrl')
        p.latest_update = d.get('latestUpdate')
        p.created_at = d.get('createdAt')
        p.updated_at = d.get('updatedAt')
        return p

    def serialize(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "tech": self.tech,
            "status": self.status,
            "owner": self.owner,
            "ownerId": self.owner_id,
            "githubUrl": self.github_url,
            "demoUrl": self.demo_url,
            "docsUrl": self.docs_url,
            "chatUrl": self.chat_url,
            "latestUpdate": self.latest_update,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def status_label(self):
        return self.status[:1].upper() + self.status[1:] if self.status else ''


def filter_updates(updates):
    return {field: updates[field] for field in updatable_fields if updates.get(field) is not None}
