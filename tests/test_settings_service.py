from sellerfin.models import ShopeeSettings, TikTokSettings
from sellerfin.services.settings_service import SettingsService


def defaults(db, model, user_id):
    return db.query(model).filter(model.user_id == user_id, model.is_default == True).all()


def test_first_profile_becomes_default(db, user_id):
    first = SettingsService.create_settings(db, user_id, {"name": "Loja 1"})
    second = SettingsService.create_settings(db, user_id, {"name": "Loja 2"})

    assert first.is_default is True
    assert second.is_default is False


def test_single_default_per_marketplace(db, user_id):
    first = SettingsService.create_settings(db, user_id, {"name": "Loja 1"})
    second = SettingsService.create_settings(db, user_id, {"name": "Loja 2", "is_default": True})
    tiktok = SettingsService.create_settings(db, user_id, {"name": "TikTok"}, "tiktok")

    db.refresh(first)
    assert [p.id for p in defaults(db, ShopeeSettings, user_id)] == [second.id]
    assert [p.id for p in defaults(db, TikTokSettings, user_id)] == [tiktok.id]

    SettingsService.set_default(db, user_id, first.id)
    assert [p.id for p in defaults(db, ShopeeSettings, user_id)] == [first.id]


def test_selected_profile(db, user_id):
    assert SettingsService.get_selected(db, user_id) is None

    first = SettingsService.create_settings(db, user_id, {"name": "Loja 1"})
    second = SettingsService.create_settings(db, user_id, {"name": "Loja 2"})

    assert SettingsService.get_selected(db, user_id).id == first.id
    assert SettingsService.get_selected(db, user_id, second.id).id == second.id


def test_update_and_delete(db, user_id):
    profile = SettingsService.create_settings(db, user_id, {"name": "Loja", "taxa_comissao_shopee": 0.14})

    updated = SettingsService.update_settings(db, user_id, profile.id, {"adicional_por_item": 3})
    assert float(updated.adicional_por_item) == 3
    assert float(updated.taxa_comissao_shopee) == 0.14

    assert SettingsService.delete_settings(db, user_id, profile.id) is True
    assert SettingsService.delete_settings(db, user_id, profile.id) is False
    assert SettingsService.update_settings(db, user_id, profile.id, {"name": "x"}) is None
