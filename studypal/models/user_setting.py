from studypal.extensions import db

AI_PROVIDER_KEY = 'ai_provider'


class UserSetting(db.Model):
    """A named account setting. StudyPal keeps the AI provider choice and
    the user's own provider API keys here, outside the per-user data store,
    so resetting study data never drops them."""

    __tablename__ = 'user_setting'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'key', name='uq_user_setting_user_key'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    key = db.Column(db.String(100), nullable=False)
    value = db.Column(db.Text, nullable=True)

    user = db.relationship('User', backref=db.backref('settings', cascade='all, delete-orphan'))

    @classmethod
    def get(cls, user_id, key, default=None):
        row = cls.query.filter_by(user_id=user_id, key=key).first()
        return row.value if row else default

    @classmethod
    def set(cls, user_id, key, value):
        """Upsert one setting. Caller commits."""
        row = cls.query.filter_by(user_id=user_id, key=key).first()
        if row is None:
            row = cls(user_id=user_id, key=key)
            db.session.add(row)
        row.value = value
        return row

    @classmethod
    def ai_provider(cls, user_id, default):
        """The provider this user chose, else *default*."""
        if user_id is None:
            return default
        return cls.get(user_id, AI_PROVIDER_KEY) or default

    @classmethod
    def save_ai_config(cls, user_id, provider, api_keys):
        """Store the provider choice and any non-empty keys.

        ``api_keys`` maps setting names (``api_key_<provider>``) to submitted
        values; blank values leave the stored key untouched. Caller commits.
        """
        cls.set(user_id, AI_PROVIDER_KEY, provider)
        for setting, value in api_keys.items():
            value = (value or '').strip()
            if value:
                cls.set(user_id, setting, value)

    def __repr__(self) -> str:
        return f'<UserSetting user_id={self.user_id} key={self.key!r}>'
