from dispatch_engine.assets import AssetStore
from dispatch_engine.estimator import round_half_up
from dispatch_engine.logistics import RESUPPLY_NOTE, ResourceLogisticsForecaster
from dispatch_engine.models import Asset, AssetType, Coordinates, Incident, Severity


def _incident(incident_id: str, region: str = "New York, USA", location=None) -> Incident:
    return Incident(
        incident_id=incident_id,
        title=incident_id,
        severity=Severity.CRITICAL,
        location_name=region,
        location=location,
    )


def _asset(asset_id: str, asset_type: AssetType, region: str = "New York, USA", **kwargs) -> Asset:
    return Asset(asset_id=asset_id, name=asset_id, asset_type=asset_type, location_name=region, **kwargs)


def test_two_incidents_one_vehicle_is_a_vehicle_shortage() -> None:
    store = AssetStore([_asset("V-1", AssetType.VEHICLE, fuel_pct=90)])
    forecaster = ResourceLogisticsForecaster(store)

    [forecast] = forecaster.forecast_shortages([_incident("I-1"), _incident("I-2")], [])

    assert forecast.region == "New York, USA"
    assert "Vehicles" in forecast.shortages
    assert "Fuel" not in forecast.shortages
    assert "Medical Kits" in forecast.shortages


def test_fuel_and_medical_kits_shortages() -> None:
    store = AssetStore(
        [
            _asset("V-1", AssetType.VEHICLE, region="London, UK", fuel_pct=30),
            _asset("G-1", AssetType.GENERATOR, region="London, UK", fuel_pct=20),
            _asset("M-1", AssetType.MEDICAL_KIT, region="London, UK", stock_count=0),
        ]
    )
    forecaster = ResourceLogisticsForecaster(store)

    [forecast] = forecaster.forecast_shortages([_incident("I-1", region="London, UK")], [])

    assert forecast.shortages == ["Fuel", "Medical Kits"]


def test_well_stocked_region_has_no_shortages_and_asset_only_regions_are_listed() -> None:
    store = AssetStore(
        [
            _asset("V-1", AssetType.VEHICLE, fuel_pct=80),
            _asset("M-1", AssetType.MEDICAL_KIT, stock_count=4),
            _asset("V-2", AssetType.VEHICLE, region="Beijing, China", fuel_pct=10),
        ]
    )
    forecaster = ResourceLogisticsForecaster(store)

    forecasts = forecaster.forecast_shortages([_incident("I-1")], [])

    assert [(f.region, f.shortages) for f in forecasts] == [
        ("New York, USA", []),
        ("Beijing, China", []),
    ]


def test_regions_match_on_exact_location_name() -> None:
    store = AssetStore([_asset("V-1", AssetType.VEHICLE, region="new york, usa", fuel_pct=80)])
    forecaster = ResourceLogisticsForecaster(store)

    regions = {f.region: f.shortages for f in forecaster.forecast_shortages([_incident("I-1")], [])}

    assert "Vehicles" in regions["New York, USA"]
    assert regions["new york, usa"] == []


def test_low_fuel_asset_gets_one_resupply_route_to_nearest_incident() -> None:
    store = AssetStore(
        [
            _asset("V-1", AssetType.VEHICLE, fuel_pct=20, location=Coordinates(40.71, -74.0)),
            _asset("V-2", AssetType.VEHICLE, fuel_pct=80, location=Coordinates(40.72, -74.0)),
        ]
    )
    forecaster = ResourceLogisticsForecaster(store)
    incidents = [
        _incident("FAR", location=Coordinates(41.5, -74.0)),
        _incident("NEAR", location=Coordinates(40.75, -74.0)),
        _incident("NOWHERE"),
    ]

    [route] = forecaster.preallocate_resupply_routes(incidents)

    assert route.asset_id == "V-1"
    assert route.origin == "New York, USA"
    assert route.to_incident_id == "NEAR"
    assert route.distance_km == round_half_up(route.distance_km, 1)
    assert 4.0 < route.distance_km < 5.0
    assert route.note == RESUPPLY_NOTE


def test_assets_without_coordinates_or_fuel_are_skipped() -> None:
    store = AssetStore(
        [
            _asset("V-1", AssetType.VEHICLE, fuel_pct=5),
            _asset("M-1", AssetType.MEDICAL_KIT, stock_count=2),
        ]
    )
    forecaster = ResourceLogisticsForecaster(store)

    assert forecaster.preallocate_resupply_routes([_incident("I-1", location=Coordinates(40.7, -74.0))]) == []
