from django.apps import AppConfig


class MdlinkerConfig(AppConfig):
    """Configuration for the mdlinker Django app."""

    name = 'mdlinker'
    verbose_name = 'Markdown internal linker'
