"""
Service Tests

Legal aid scoring, translation helpers and simplification repair.
"""
import pytest

from docbridge.models import LegalAidContact
from docbridge.services.legal_aid_service import (
    match_contacts, score_contact, seed_legal_aid_contacts,
)
from docbridge.services.openai_service import (
    safe_json_loads, validate_and_repair_simplification,
)
from docbridge.services.translation_service import mock_translation, translator_prompt


class TestScoreContact:
    """Test legal aid scoring"""

    def contact(self, **kwargs):
        defaults = {
            'name': 'Clinic',
            'languages': ['English', 'Arabic'],
            'specialties': ['housing'],
            'region': 'West',
            'interpreter_available': False,
        }
        defaults.update(kwargs)
        return LegalAidContact(**defaults)

    def test_language_match(self):
        assert score_contact(self.contact(), 'Arabic') == 3

    def test_specialty_and_region(self):
        assert score_contact(self.contact(), 'arabic', document_type='Housing', region='west') == 6

    def test_interpreter_only(self):
        contact = self.contact(interpreter_available=True)
        assert score_contact(contact, 'Khmer') == 1

    def test_no_language_no_interpreter(self):
        assert score_contact(self.contact(), 'Khmer', document_type='housing') == 0


class TestMatchContacts:

    def test_sorted_by_score_then_name(self, app):
        with app.app_context():
            contacts = match_contacts('Spanish', document_type='healthcare')
            scores = [c['match_score'] for c in contacts]
            assert scores == sorted(scores, reverse=True)
            assert contacts[0]['name'] == 'Patient Advocacy Project'

    def test_zero_limit(self, app):
        with app.app_context():
            assert match_contacts('Spanish', limit=0) == []

    def test_seed_is_idempotent(self, app):
        with app.app_context():
            assert seed_legal_aid_contacts() == 0


class TestTranslationHelpers:

    @pytest.mark.parametrize('language, prefix', [
        ('Hindi', '[हिंदी अनुवाद Demo]'),
        ('Spanish', '[Traducción Demo]'),
        ('French', '[Traduction Demo]'),
        ('Tigrinya', '[Tigrinya Translation Demo]'),
    ])
    def test_mock_prefix(self, language, prefix):
        assert mock_translation('Hello', language).startswith(prefix)

    def test_mock_truncates(self):
        out = mock_translation('a' * 500, 'Hindi')
        assert 'a' * 100 in out
        assert 'a' * 101 not in out

    def test_prompt_names_languages(self):
        prompt = translator_prompt('en', 'Amharic')
        assert 'from English into Amharic' in prompt
        assert 'from de into Amharic' in translator_prompt('de', 'Amharic')


class TestSimplificationRepair:

    def test_safe_json_loads_code_fence(self):
        obj, err = safe_json_loads('```json\n{"key_points": ["a"]}\n```')
        assert err == ''
        assert obj == {'key_points': ['a']}

    def test_safe_json_loads_embedded(self):
        obj, err = safe_json_loads('Sure! {"simple_explanation": "ok"} Hope this helps.')
        assert obj == {'simple_explanation': 'ok'}

    def test_safe_json_loads_invalid(self):
        obj, err = safe_json_loads('no json here')
        assert obj is None
        assert err

    def test_repair_fills_missing(self):
        assert validate_and_repair_simplification({'key_points': 'not a list'}) == {
            'simple_explanation': '',
            'key_points': [],
            'urgent_actions': [],
        }

    def test_repair_cleans_lists(self):
        repaired = validate_and_repair_simplification({
            'simple_explanation': '  Plain words.  ',
            'key_points': ['one', '', None, 2],
            'urgent_actions': ['Call today'],
        })
        assert repaired['simple_explanation'] == 'Plain words.'
        assert repaired['key_points'] == ['one', '2']
        assert repaired['urgent_actions'] == ['Call today']


class TestParameterStore:

    def test_environment_wins(self, monkeypatch):
        import config
        monkeypatch.setenv('OPENAI_API_KEY', 'sk-env')
        assert config.get_parameter('openai-api-key') == 'sk-env'

    def test_ssm_failure_logs_and_falls_back(self, monkeypatch, caplog):
        import config

        def broken_client(*args, **kwargs):
            raise RuntimeError('no credentials')

        monkeypatch.delenv('LINGODOTDEV_API_KEY', raising=False)
        monkeypatch.setenv('USE_PARAMETER_STORE', '1')
        monkeypatch.setattr(config.boto3, 'client', broken_client)

        with caplog.at_level('WARNING', logger='config'):
            assert config.get_parameter('lingodotdev-api-key', 'fallback') == 'fallback'
        assert 'Could not load lingodotdev-api-key from Parameter Store' in caplog.text
