import uuid

import pytest
from httpx import AsyncClient, ASGITransport

from models.models import Farm, FarmHarvest, FarmHarvestCrop, Harvest, Producer


def farm_payload(producer_id, **overrides):
    payload = {
        "name": "Fazenda Santa Luzia",
        "city": "Campinas",
        "state": "SP",
        "totalArea": 100,
        "arableArea": 70,
        "vegetationArea": 30,
        "producerId": producer_id,
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_farm_crud(app_with_overrides, session_for_tests, producer, auth_headers):
    transport = ASGITransport(app=app_with_overrides)

    async with AsyncClient(transport=transport, base_url="http://test", headers=auth_headers) as client:
        # 1. Create
        response = await client.post("/api/farms", json=farm_payload(producer.id, harvests=[
            {"year": "2024", "crops": ["soy", "corn", "soy"]}
        ]))
        assert response.status_code == 201
        data = response.json()["data"]
        farm_id = data["id"]
        assert data["totalArea"] == 100.0
        assert data["producerId"] == producer.id
        assert data["crops"] == ["corn", "soy"]
        assert data["harvests"] == [{"year": "2024", "description": "Safra 2024/2025", "crops": ["corn", "soy"]}]

        # 2. Fetch
        response = await client.get(f"/api/farms/{farm_id}")
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Fazenda Santa Luzia"

        # 3. Partial update of the name only
        response = await client.patch(f"/api/farms/{farm_id}", json={"name": "Fazenda Nova"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Fazenda Nova"
        assert data["arableArea"] == 70.0
        assert data["crops"] == ["corn", "soy"]

        # 4. Replace the harvests
        response = await client.patch(f"/api/farms/{farm_id}", json={"harvests": [
            {"year": "2025", "crops": ["coffee"]}
        ]})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["crops"] == ["coffee"]
        assert [h["year"] for h in data["harvests"]] == ["2025"]

        # 5. Delete
        response = await client.delete(f"/api/farms/{farm_id}")
        assert response.status_code == 200

        response = await client.get(f"/api/farms/{farm_id}")
        assert response.status_code == 404
        assert response.json()["message"] == f"Farm with ID {farm_id} not found"

    assert session_for_tests.query(FarmHarvest).count() == 0
    assert session_for_tests.query(FarmHarvestCrop).count() == 0
    # Harvests are shared and outlive the farm
    assert session_for_tests.query(Harvest).count() == 2
    assert session_for_tests.query(Producer).count() == 1


@pytest.mark.asyncio
async def test_create_farm_rejects_invalid_areas(app_with_overrides, session_for_tests, producer, auth_headers):
    transport = ASGITransport(app=app_with_overrides)

    async with AsyncClient(transport=transport, base_url="http://test", headers=auth_headers) as client:
        response = await client.post("/api/farms", json=farm_payload(producer.id, arableArea=70, vegetationArea=40))
        assert response.status_code == 400
        assert response.json()["message"] == "Sum of arable and vegetation areas (110.00 ha) exceeds total area (100.00 ha)"

        response = await client.post("/api/farms", json=farm_payload(producer.id, totalArea=0, arableArea=0, vegetationArea=0))
        assert response.status_code == 400
        assert response.json()["message"] == "Total area must be greater than 0"

        response = await client.post("/api/farms", json=farm_payload(producer.id, arableArea=-1))
        assert response.status_code == 400
        assert response.json()["message"] == "Arable area cannot be negative"

        # Missing field
        payload = farm_payload(producer.id)
        del payload["totalArea"]
        response = await client.post("/api/farms", json=payload)
        assert response.status_code == 400
        assert response.json()["message"].startswith("totalArea:")

        # Unknown state
        response = await client.post("/api/farms", json=farm_payload(producer.id, state="XX"))
        assert response.status_code == 400

        # Unknown crop
        response = await client.post("/api/farms", json=farm_payload(producer.id, harvests=[{"year": "2024", "crops": ["rice"]}]))
        assert response.status_code == 400

        # Unknown producer
        response = await client.post("/api/farms", json=farm_payload(str(uuid.uuid4())))
        assert response.status_code == 404

    assert session_for_tests.query(Farm).count() == 0


@pytest.mark.asyncio
async def test_update_farm_validates_merged_areas(app_with_overrides, session_for_tests, farm, auth_headers):
    transport = ASGITransport(app=app_with_overrides)

    async with AsyncClient(transport=transport, base_url="http://test", headers=auth_headers) as client:
        # Stored: total 100, arable 60, vegetation 30
        response = await client.patch(f"/api/farms/{farm.id}", json={"arableArea": 80})
        assert response.status_code == 400
        assert response.json()["message"] == "Sum of arable and vegetation areas (110.00 ha) exceeds total area (100.00 ha)"

        response = await client.patch(f"/api/farms/{farm.id}", json={"totalArea": 50})
        assert response.status_code == 400

        response = await client.patch(f"/api/farms/{farm.id}", json={"arableArea": 70})
        assert response.status_code == 200
        assert response.json()["data"]["arableArea"] == 70.0

        response = await client.patch(f"/api/farms/{farm.id}", json={"producerId": str(uuid.uuid4())})
        assert response.status_code == 404

    session_for_tests.expire_all()
    stored = session_for_tests.query(Farm).filter(Farm.id == farm.id).one()
    assert float(stored.total_area) == 100.0
    assert float(stored.arable_area) == 70.0
    assert float(stored.vegetation_area) == 30.0


@pytest.mark.asyncio
async def test_farm_areas_are_checked_after_rounding(app_with_overrides, session_for_tests, producer, auth_headers):
    transport = ASGITransport(app=app_with_overrides)

    async with AsyncClient(transport=transport, base_url="http://test", headers=auth_headers) as client:
        # Stored as 100.00 / 50.01 / 50.00
        response = await client.post("/api/farms", json=farm_payload(
            producer.id, totalArea=100.004, arableArea=50.006, vegetationArea=49.996
        ))
        assert response.status_code == 400
        assert response.json()["message"] == "Sum of arable and vegetation areas (100.01 ha) exceeds total area (100.00 ha)"

        response = await client.post("/api/farms", json=farm_payload(
            producer.id, totalArea=0.004, arableArea=0, vegetationArea=0
        ))
        assert response.status_code == 400
        assert response.json()["message"] == "Total area must be greater than 0"

        response = await client.post("/api/farms", json=farm_payload(
            producer.id, totalArea=100.004, arableArea=70.004, vegetationArea=30.004
        ))
        assert response.status_code == 201
        farm_id = response.json()["data"]["id"]

        # Stored total 100.00, arable 70.00, vegetation 30.00
        response = await client.patch(f"/api/farms/{farm_id}", json={"arableArea": 70.006})
        assert response.status_code == 400
        assert response.json()["message"] == "Sum of arable and vegetation areas (100.01 ha) exceeds total area (100.00 ha)"

    session_for_tests.expire_all()
    stored = session_for_tests.query(Farm).one()
    assert float(stored.total_area) == 100.0
    assert float(stored.arable_area) == 70.0
    assert float(stored.vegetation_area) == 30.0


@pytest.mark.asyncio
async def test_farm_areas_reject_nan_and_infinity(app_with_overrides, session_for_tests, producer, farm, auth_headers):
    transport = ASGITransport(app=app_with_overrides)
    json_headers = {"Content-Type": "application/json"}
    body = (
        '{"name": "Fazenda Santa Luzia", "city": "Campinas", "state": "SP", '
        '"totalArea": %s, "arableArea": 10, "vegetationArea": 10, "producerId": "%s"}'
    )

    async with AsyncClient(transport=transport, base_url="http://test", headers=auth_headers) as client:
        for value in ("NaN", "Infinity", "-Infinity"):
            response = await client.post("/api/farms", content=body % (value, producer.id), headers=json_headers)
            assert response.status_code == 400
            assert response.json()["message"].startswith("totalArea:")

        response = await client.patch(f"/api/farms/{farm.id}", content='{"vegetationArea": NaN}', headers=json_headers)
        assert response.status_code == 400
        assert response.json()["message"].startswith("vegetationArea:")

    assert session_for_tests.query(Farm).count() == 1


@pytest.mark.asyncio
async def test_city_must_belong_to_state(app_with_overrides, session_for_tests, producer, cities, auth_headers):
    transport = ASGITransport(app=app_with_overrides)

    async with AsyncClient(transport=transport, base_url="http://test", headers=auth_headers) as client:
        response = await client.post("/api/farms", json=farm_payload(producer.id, city="Belo Horizonte", state="SP"))
        assert response.status_code == 400
        assert response.json()["message"] == "City 'Belo Horizonte' does not exist in state 'SP'"

        response = await client.post("/api/farms", json=farm_payload(producer.id, city="são paulo", state="SP"))
        assert response.status_code == 201
        farm_id = response.json()["data"]["id"]

        response = await client.patch(f"/api/farms/{farm_id}", json={"state": "MG"})
        assert response.status_code == 400

        response = await client.patch(f"/api/farms/{farm_id}", json={"city": "Uberlândia", "state": "MG"})
        assert response.status_code == 200
        assert response.json()["data"]["state"] == "MG"


@pytest.mark.asyncio
async def test_list_and_filter_farms(app_with_overrides, session_for_tests, producer, auth_headers):
    other = Producer(name="Maria Oliveira", document="52998224725")
    session_for_tests.add(other)
    session_for_tests.commit()

    session_for_tests.add_all([
        Farm(name="Alpha", city="Campinas", state="SP", total_area=300, arable_area=100, vegetation_area=100, producer_id=producer.id),
        Farm(name="Beta", city="Sorriso", state="MT", total_area=1000, arable_area=800, vegetation_area=100, producer_id=producer.id),
        Farm(name="Gamma", city="Campinas", state="SP", total_area=50, arable_area=10, vegetation_area=10, producer_id=other.id),
    ])
    session_for_tests.commit()

    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test", headers=auth_headers) as client:
        response = await client.get("/api/farms")
        data = response.json()["data"]
        assert data["total"] == 3
        assert [f["name"] for f in data["items"]] == ["Alpha", "Beta", "Gamma"]

        response = await client.get("/api/farms", params={"sortBy": "totalArea", "sortOrder": "DESC"})
        assert [f["name"] for f in response.json()["data"]["items"]] == ["Beta", "Alpha", "Gamma"]

        response = await client.get("/api/farms", params={"state": "SP"})
        assert response.json()["data"]["total"] == 2

        response = await client.get("/api/farms", params={"city": "campinas"})
        assert response.json()["data"]["total"] == 2

        response = await client.get("/api/farms", params={"search": "sorr"})
        assert [f["name"] for f in response.json()["data"]["items"]] == ["Beta"]

        response = await client.get("/api/farms", params={"producerId": other.id})
        assert [f["name"] for f in response.json()["data"]["items"]] == ["Gamma"]

        response = await client.get("/api/farms", params={"sortBy": "unknown"})
        assert response.status_code == 400

        response = await client.get(f"/api/farms/producer/{producer.id}")
        assert [f["name"] for f in response.json()["data"]] == ["Alpha", "Beta"]

        response = await client.get(f"/api/farms/producer/{uuid.uuid4()}")
        assert response.status_code == 404

        response = await client.get("/api/farms/state/MT")
        assert [f["name"] for f in response.json()["data"]] == ["Beta"]


@pytest.mark.asyncio
async def test_farm_stats(app_with_overrides, session_for_tests, producer, auth_headers):
    transport = ASGITransport(app=app_with_overrides)

    async with AsyncClient(transport=transport, base_url="http://test", headers=auth_headers) as client:
        response = await client.get("/api/farms/stats/total-area")
        assert response.json()["data"]["totalArea"] == 0

        response = await client.post("/api/farms", json=farm_payload(producer.id, name="Fazenda Um", harvests=[
            {"year": "2024", "crops": ["soy", "corn"]}
        ]))
        assert response.status_code == 201
        response = await client.post("/api/farms", json=farm_payload(producer.id, name="Fazenda Dois", state="MG", city="Uberaba", harvests=[
            {"year": "2023", "crops": ["soy"]},
            {"year": "2024", "crops": ["soy"]}
        ]))
        assert response.status_code == 201

        response = await client.get("/api/farms/stats/total-area")
        assert response.json()["data"]["totalArea"] == 200.0

        response = await client.get("/api/farms/stats/by-state")
        assert sorted(response.json()["data"], key=lambda r: r["state"]) == [
            {"state": "MG", "count": 1},
            {"state": "SP", "count": 1},
        ]

        response = await client.get("/api/farms/stats/land-use")
        assert response.json()["data"] == {"arableArea": 140.0, "vegetationArea": 60.0}

        # Each farm counted once per crop even across harvests
        response = await client.get("/api/farms/stats/crops-distribution")
        assert response.json()["data"] == [
            {"cropType": "soy", "count": 2},
            {"cropType": "corn", "count": 1},
        ]

        response = await client.get("/api/harvests")
        harvests = response.json()["data"]
        assert [(h["year"], h["farmCount"]) for h in harvests] == [("2023", 1), ("2024", 2)]
        assert harvests[0]["description"] == "Safra 2023/2024"
