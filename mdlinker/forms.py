"""Forms for the mdlinker app.

The process form validates the JSON payload of the API before it reaches
the engine: content and sitemap URL are required, and the optional engine
options are range-checked so a request cannot push the engine outside its
supported configuration.
"""

from __future__ import annotations

from typing import Any, Dict

from django import forms

ENGINE_OPTION_FIELDS = (
    "preset",
    "acceptance_threshold",
    "ngram_max",
    "single_word_policy",
    "single_word_matching",
    "dedup",
    "max_links",
)


class ProcessForm(forms.Form):
    """Validate a request to link a block of markdown content."""

    content = forms.CharField(
        strip=False,
        label='Content',
        help_text='Markdown content that should receive internal links.',
    )
    sitemap_url = forms.CharField(
        strip=True,
        max_length=2048,
        label='Sitemap URL',
        help_text='URL of the sitemap (or sitemap index) listing the site pages.',
    )
    preset = forms.ChoiceField(
        required=False,
        choices=[('', 'default'), ('semantic', 'Semantic'), ('strict', 'Strict')],
    )
    acceptance_threshold = forms.FloatField(required=False, min_value=0.0, max_value=1.0)
    ngram_max = forms.IntegerField(required=False, min_value=2, max_value=5)
    single_word_policy = forms.ChoiceField(
        required=False,
        choices=[('', 'default'), ('length', 'Length'), ('capitalized', 'Capitalized')],
    )
    single_word_matching = forms.ChoiceField(
        required=False,
        choices=[('', 'default'), ('exact', 'Exact'), ('semantic', 'Semantic')],
    )
    dedup = forms.ChoiceField(
        required=False,
        choices=[('', 'default'), ('keyword', 'One link per keyword'), ('url', 'One link per URL')],
    )
    max_links = forms.IntegerField(required=False, min_value=0, max_value=500)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'ProcessForm':
        """Build the form from the API's JSON body (``sitemapUrl`` and ``options``)."""

        data: Dict[str, Any] = {
            'content': payload.get('content'),
            'sitemap_url': payload.get('sitemapUrl', payload.get('sitemap_url')),
        }
        options = payload.get('options')
        if isinstance(options, dict):
            for name in ENGINE_OPTION_FIELDS:
                if options.get(name) is not None:
                    data[name] = options[name]
        return cls({key: value for key, value in data.items() if value is not None})

    def clean_content(self) -> str:
        # Clients that double-escape their payload send literal "\n" sequences.
        content = self.cleaned_data['content']
        return content.replace('\\n', '\n')

    def missing_required(self) -> bool:
        return any(
            name in self.errors and not self.data.get(name)
            for name in ('content', 'sitemap_url')
        )

    def engine_options(self) -> Dict[str, Any]:
        """Return only the options the caller actually set."""

        options: Dict[str, Any] = {}
        for name in ENGINE_OPTION_FIELDS:
            value = self.cleaned_data.get(name)
            if value in (None, ''):
                continue
            options[name] = value
        return options
