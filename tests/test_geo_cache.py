import json

from run_atlas.cache import GeoCache, MemoryStorage, quantize_key
from run_atlas.config import CITY_CACHE_KEY, COUNTRY_CACHE_KEY


def _seeded(countries=None, cities=None):
    storage = MemoryStorage()
    if countries is not None:
        storage.set(COUNTRY_CACHE_KEY, json.dumps(countries))
    if cities is not None:
        storage.set(CITY_CACHE_KEY, json.dumps(cities))
    return storage


def test_quantize_key_format():
    assert quantize_key(52.52, 13.405) == "52.520,13.405"
    assert quantize_key(-33.86881, 151.20929) == "-33.869,151.209"


def test_quantize_key_folds_negative_zero():
    assert quantize_key(-0.0001, -0.0004) == "0.000,0.000"
    assert quantize_key(0.0, 0.0) == "0.000,0.000"


def test_cleanup_renormalizes_legacy_country_names():
    storage = _seeded({"52.520,13.405": "Deutschland"}, {"52.520,13.405": "Berlin"})
    cache = GeoCache(storage)
    cache.load()
    stats = cache.cleanup()
    assert stats.renormalized == 1
    assert cache.get("52.520,13.405") == ("Germany", "Berlin")
    assert cache.cleanup().renormalized == 0


def test_cleanup_removes_orphan_cities():
    storage = _seeded({"1.000,1.000": "France"}, {"1.000,1.000": "Paris", "2.000,2.000": "Nowhere"})
    cache = GeoCache(storage)
    cache.load()
    stats = cache.cleanup()
    assert stats.orphans_removed == 1
    cache.save()
    assert json.loads(storage.get(CITY_CACHE_KEY)) == {"1.000,1.000": "Paris"}


def test_missing_maps_start_empty():
    cache = GeoCache(MemoryStorage())
    cache.load()
    assert len(cache) == 0
    assert cache.corrupted_maps == 0


def test_undecodable_map_is_discarded_alone():
    storage = MemoryStorage()
    storage.set(COUNTRY_CACHE_KEY, json.dumps({"1.000,1.000": "France"}))
    storage.set(CITY_CACHE_KEY, "{not json")
    cache = GeoCache(storage)
    cache.load()
    assert cache.corrupted_maps == 1
    assert cache.get("1.000,1.000") == ("France", "Unknown")


def test_wrong_shape_map_is_discarded_entirely():
    storage = _seeded({"1.000,1.000": "France", "2.000,2.000": 7})
    cache = GeoCache(storage)
    cache.load()
    assert cache.corrupted_maps == 1
    assert "1.000,1.000" not in cache


def test_list_payload_is_discarded():
    storage = _seeded(["France"])
    cache = GeoCache(storage)
    cache.load()
    assert cache.corrupted_maps == 1
    assert len(cache) == 0


def test_put_normalizes_and_is_not_persisted_until_save():
    storage = MemoryStorage()
    cache = GeoCache(storage)
    cache.load()
    cache.put("51.507,-0.128", "uk", "London")
    assert cache.get("51.507,-0.128") == ("United Kingdom", "London")
    assert storage.get(COUNTRY_CACHE_KEY) is None
    cache.save()
    reloaded = GeoCache(storage)
    reloaded.load()
    assert reloaded.get("51.507,-0.128") == ("United Kingdom", "London")


def test_miss_returns_none():
    cache = GeoCache(MemoryStorage())
    cache.load()
    assert cache.get("0.000,0.000") is None
