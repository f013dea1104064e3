import responses

from quran_api import QURAN_API_BASE_URL, QuranService, RevelationPlace

SURAH_LIST_URL = f"{QURAN_API_BASE_URL}/surah"


def chapter_entry(number: int, name: str, english_name: str, ayahs: int, place: str = "Meccan") -> dict:
    return {
        "number": number,
        "name": name,
        "englishName": english_name,
        "englishNameTranslation": "",
        "numberOfAyahs": ayahs,
        "revelationType": place,
    }


def verse_entry(global_number: int, number_in_surah: int, text: str, sajda=False) -> dict:
    return {
        "number": global_number,
        "text": text,
        "numberInSurah": number_in_surah,
        "juz": 1,
        "manzil": 1,
        "page": 1,
        "ruku": 1,
        "hizbQuarter": 1,
        "sajda": sajda,
    }


def chapter_payload(number: int, ayahs: list) -> dict:
    data = chapter_entry(number, "سُورَةُ ٱلْإِخْلَاصِ", "Al-Ikhlaas", len(ayahs))
    data["ayahs"] = ayahs
    data["edition"] = {
        "identifier": "quran-uthmani",
        "language": "ar",
        "name": "القرآن الكريم برسم العثماني",
        "englishName": "Uthmani",
        "format": "text",
        "type": "quran",
    }
    return {"code": 200, "status": "OK", "data": data}


def test_list_chapters_parses_index():
    payload = {
        "code": 200,
        "status": "OK",
        "data": [
            chapter_entry(1, "سُورَةُ ٱلْفَاتِحَةِ", "Al-Faatiha", 7),
            chapter_entry(2, "سُورَةُ البَقَرَةِ", "Al-Baqara", 286, "Medinan"),
        ],
    }
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, SURAH_LIST_URL, json=payload, status=200)
        chapters = QuranService().list_chapters()

    assert [chapter.number for chapter in chapters] == [1, 2]
    assert chapters[1].english_name == "Al-Baqara"
    assert chapters[1].verse_count == 286
    assert chapters[1].revelation_place is RevelationPlace.MEDINAN


def test_list_chapters_skips_malformed_entries():
    payload = {
        "code": 200,
        "status": "OK",
        "data": [chapter_entry(1, "سُورَةُ ٱلْفَاتِحَةِ", "Al-Faatiha", 7), {"number": 2}],
    }
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, SURAH_LIST_URL, json=payload, status=200)
        chapters = QuranService().list_chapters()

    assert [chapter.number for chapter in chapters] == [1]


def test_list_chapters_returns_empty_on_server_error():
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, SURAH_LIST_URL, json={"code": 500}, status=500)
        assert QuranService().list_chapters() == []


def test_list_chapters_returns_empty_on_error_envelope():
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, SURAH_LIST_URL, json={"code": 404, "status": "NOT FOUND"}, status=200)
        assert QuranService().list_chapters() == []


def test_get_chapter_orders_verses_and_reads_edition():
    ayahs = [
        verse_entry(6222, 2, "ٱللَّهُ ٱلصَّمَدُ"),
        verse_entry(6221, 1, "قُلْ هُوَ ٱللَّهُ أَحَدٌ", sajda={"id": 1, "recommended": True}),
    ]
    url = f"{QURAN_API_BASE_URL}/surah/112/quran-uthmani"
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, url, json=chapter_payload(112, ayahs), status=200)
        chapter = QuranService().get_chapter(112)

    assert chapter is not None
    assert chapter.number == 112
    assert [verse.number_in_chapter for verse in chapter.verses] == [1, 2]
    assert chapter.verses[0].is_prostration is True
    assert chapter.verses[1].is_prostration is False
    assert chapter.edition.identifier == "quran-uthmani"
    assert chapter.meta.english_name == "Al-Ikhlaas"


def test_get_chapter_uses_configured_edition():
    url = "https://quran.example/v1/surah/112/quran-simple"
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, url, json=chapter_payload(112, [verse_entry(1, 1, "x")]), status=200)
        chapter = QuranService(base_url="https://quran.example/v1/", edition="quran-simple").get_chapter(112)

    assert chapter is not None
    assert len(chapter.verses) == 1


def test_get_chapter_returns_none_on_http_error():
    url = f"{QURAN_API_BASE_URL}/surah/5/quran-uthmani"
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, url, json={"code": 503, "status": "Unavailable"}, status=503)
        assert QuranService().get_chapter(5) is None


def test_get_chapter_rejects_gaps_in_verse_numbers():
    ayahs = [verse_entry(1, 1, "a"), verse_entry(3, 3, "c")]
    url = f"{QURAN_API_BASE_URL}/surah/112/quran-uthmani"
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, url, json=chapter_payload(112, ayahs), status=200)
        assert QuranService().get_chapter(112) is None


def test_get_chapter_out_of_range_makes_no_request():
    with responses.RequestsMock() as mock:
        service = QuranService()
        assert service.get_chapter(0) is None
        assert service.get_chapter(115) is None
        assert len(mock.calls) == 0
