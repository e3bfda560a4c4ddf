"""
Database Models

Key Models:
- User: Signed-in person (identity comes from the Flask-Login session)
- Document: Source text a user uploaded or pasted
- Translation: One translation + simplification of a document
- LegalAidContact: Directory entry used for language-aware referrals
"""
from datetime import datetime, timezone
from flask_login import UserMixin
from docbridge import db


def _utcnow():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    display_name = db.Column(db.String(255))
    preferred_language = db.Column(db.String(50))
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    documents = db.relationship('Document', back_populates='user', lazy='dynamic')
    translations = db.relationship('Translation', back_populates='user', lazy='dynamic')


class Document(db.Model):
    __tablename__ = 'documents'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    original_text = db.Column(db.Text, nullable=False)
    file_name = db.Column(db.String(255), default='Pasted text')
    document_type = db.Column(db.String(50), default='other')
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    user = db.relationship('User', back_populates='documents')
    translations = db.relationship(
        'Translation', back_populates='document', cascade='all, delete-orphan'
    )

    def to_dict(self):
        return {
            'id': self.id,
            'file_name': self.file_name,
            'document_type': self.document_type,
            'original_text': self.original_text,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Translation(db.Model):
    """
    A translated document together with its plain-language explanation.

    key_points and urgent_actions are stored as JSON lists.
    """
    __tablename__ = 'translations'

    id = db.Column(db.Integer, primary_key=True)
    document_id = db.Column(db.Integer, db.ForeignKey('documents.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    source_language = db.Column(db.String(50), default='en')
    target_language = db.Column(db.String(50), nullable=False)
    translated_text = db.Column(db.Text, nullable=False)
    simplified_text = db.Column(db.Text, default='')
    key_points = db.Column(db.JSON, default=list)
    urgent_actions = db.Column(db.JSON, default=list)
    provider = db.Column(db.String(20))
    is_mock = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, index=True)

    document = db.relationship('Document', back_populates='translations')
    user = db.relationship('User', back_populates='translations')

    def to_dict(self, include_document=True):
        result = {
            'id': self.id,
            'document_id': self.document_id,
            'source_language': self.source_language,
            'target_language': self.target_language,
            'translated_text': self.translated_text,
            'simplified_text': self.simplified_text or '',
            'key_points': self.key_points or [],
            'urgent_actions': self.urgent_actions or [],
            'provider': self.provider,
            'is_mock': bool(self.is_mock),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_document and self.document is not None:
            result['document'] = self.document.to_dict()
        return result


class LegalAidContact(db.Model):
    __tablename__ = 'legal_aid_contacts'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    organization = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    email = db.Column(db.String(255))
    website = db.Column(db.String(500))
    region = db.Column(db.String(100))
    languages = db.Column(db.JSON, default=list)
    specialties = db.Column(db.JSON, default=list)
    interpreter_available = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def speaks(self, language):
        wanted = (language or '').strip().lower()
        return any((lang or '').strip().lower() == wanted for lang in (self.languages or []))

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'organization': self.organization,
            'phone': self.phone,
            'email': self.email,
            'website': self.website,
            'region': self.region,
            'languages': self.languages or [],
            'specialties': self.specialties or [],
            'interpreter_available': bool(self.interpreter_available),
        }
