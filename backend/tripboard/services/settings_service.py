"""
Persisted key/value settings.
"""
from sqlalchemy.orm import Session
from typing import Optional
from tripboard.models.setting import Setting


def get_setting(key: str, db: Session) -> Optional[str]:
    setting = db.query(Setting).filter(Setting.key == key).first()
    return setting.value if setting else None


def set_setting(key: str, value: str, db: Session) -> Setting:
    setting = db.query(Setting).filter(Setting.key == key).first()
    if setting:
        setting.value = value
    else:
        setting = Setting(key=key, value=value)
        db.add(setting)
    db.commit()
    db.refresh(setting)
    return setting


def delete_setting(key: str, db: Session) -> bool:
    deleted = db.query(Setting).filter(Setting.key == key).delete()
    db.commit()
    return deleted > 0
