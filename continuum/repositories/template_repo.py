"""Repository for email templates and notification settings."""

from continuum.models.communications import EmailTemplate, NotificationSettings
from continuum.repositories.base import DocumentRepository


class TemplateRepository(DocumentRepository):
    INDEX_KEY = "email-templates:index"
    SETTINGS_KEY = "settings:notifications"

    @staticmethod
    def template_key(template_id: str) -> str:
        return f"email-template:{template_id}"

    async def get(self, template_id: str) -> EmailTemplate | None:
        return self._load(self.template_key(template_id), EmailTemplate)

    async def save(self, template: EmailTemplate) -> EmailTemplate:
        self._store(self.template_key(template.id), template)
        self.redis.sadd(self.INDEX_KEY, template.id)
        return template

    async def list_all(self) -> list[EmailTemplate]:
        ids = sorted(self.redis.smembers(self.INDEX_KEY))
        templates = self._load_many((self.template_key(i) for i in ids), EmailTemplate)
        # System templates first, then by name
        return sorted(templates, key=lambda t: (not t.is_system, t.name.lower()))

    async def delete(self, template_id: str) -> None:
        self.redis.delete(self.template_key(template_id))
        self.redis.srem(self.INDEX_KEY, template_id)

    async def get_settings(self) -> NotificationSettings:
        settings = self._load(self.SETTINGS_KEY, NotificationSettings)
        return settings or NotificationSettings()

    async def save_settings(self, settings: NotificationSettings) -> NotificationSettings:
        self._store(self.SETTINGS_KEY, settings)
        return settings
