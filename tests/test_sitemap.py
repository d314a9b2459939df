import gzip
import os
import threading

import pytest

from seo_sitemap import ChangeFreq, SerializationError, Sitemap, SitemapError, SitemapLoc, SitemapOptions

from conftest import BASE_URL


def make_sitemap(tmp_path, **kwargs):
    options = SitemapOptions(hostname=BASE_URL, output_path=str(tmp_path), compress=False)
    for key, value in kwargs.items():
        setattr(options, key, value)
    return Sitemap(name="large", options=options)


def record_size(tmp_path, location, **kwargs):
    """Bytes one entry adds to a sitemap, and the size of the empty document."""
    sample = make_sitemap(tmp_path, **kwargs)
    empty = sample.xml_size
    sample.add(SitemapLoc(location))
    return sample.xml_size - empty, empty


def test_single_file_keeps_insertion_order(tmp_path, now, read_locs):
    sm = make_sitemap(tmp_path)
    routes = [f"/page-{i}" for i in range(25)]
    for route in routes:
        sm.add(SitemapLoc(route, last_modified=now, change_frequency=ChangeFreq.ALWAYS, priority=0.4))

    assert sm.next_sitemap is None
    assert sm.save() == ["large.xml"]
    assert read_locs(tmp_path / "large.xml") == [BASE_URL + route for route in routes]


def test_count_limit_splits_into_continuations(tmp_path, read_locs):
    sm = make_sitemap(tmp_path, max_urls=3)
    locs = [SitemapLoc(f"/p{i}") for i in range(7)]
    for loc in locs:
        sm.add(loc)

    assert [link.url_count for link in sm.links()] == [3, 3, 1]
    assert [link.sequence for link in sm.links()] == [0, 1, 2]
    assert sm.total_url_count == 7
    assert sm.next_sitemap.next_sitemap.locs == (locs[6],)

    assert sm.save() == ["large.xml", "large1.xml", "large2.xml"]
    assert read_locs(tmp_path / "large2.xml") == [f"{BASE_URL}/p6"]


def test_size_limit_relocates_only_the_triggering_entry(tmp_path):
    per_record, empty = record_size(tmp_path, "/page-000")
    sm = make_sitemap(tmp_path, max_file_size=empty + 3 * per_record + 1)
    locs = [SitemapLoc(f"/page-{i:03d}") for i in range(4)]
    for loc in locs:
        sm.add(loc)

    assert sm.locs == tuple(locs[:3])
    assert sm.next_sitemap.locs == (locs[3],)
    assert sm.xml_size < sm.max_file_size


def test_size_threshold_is_exclusive(tmp_path):
    per_record, empty = record_size(tmp_path, "/page-000")
    sm = make_sitemap(tmp_path, max_file_size=empty + 2 * per_record)
    sm.add(SitemapLoc("/page-001"))
    sm.add(SitemapLoc("/page-002"))

    assert sm.url_count == 1
    assert sm.next_sitemap.url_count == 1


def test_measured_size_matches_written_file(tmp_path, build_routes, now):
    sm = make_sitemap(tmp_path, max_file_size=20_000, pretty_print=True)
    for route in build_routes(300, 40, 10):
        sm.add(SitemapLoc(route, last_modified=now, change_frequency=ChangeFreq.HOURLY, priority=1))

    filenames = sm.save()
    assert len(filenames) > 1
    for link, filename in zip(sm.links(), filenames):
        on_disk = os.path.getsize(tmp_path / filename)
        assert link.xml_size == link.count_xml_bytes() == on_disk
        assert on_disk < 20_000


def test_location_is_rewritten_once(tmp_path):
    sm = make_sitemap(tmp_path)
    loc = SitemapLoc("/test")
    sm.add(loc)

    assert loc.location == f"{BASE_URL}/test"
    assert loc.location == f"{BASE_URL}/test"
    assert sm.locs[0] is loc


def test_forwarded_entry_gets_hostname_once(tmp_path):
    sm = make_sitemap(tmp_path, max_urls=1)
    first, second = SitemapLoc("/a"), SitemapLoc("/b")
    sm.add(first)
    sm.add(second)

    assert first.location == f"{BASE_URL}/a"
    assert second.location == f"{BASE_URL}/b"


def test_unencodable_entry_leaves_chain_untouched(tmp_path):
    sm = make_sitemap(tmp_path, max_urls=1)
    sm.add(SitemapLoc("/ok"))
    bad = SitemapLoc("/bad", priority=2.0)

    with pytest.raises(SerializationError):
        sm.add(bad)
    assert bad.location == "/bad"
    assert sm.next_sitemap is None
    assert sm.total_url_count == 1


def test_entry_too_large_for_empty_file(tmp_path):
    sm = make_sitemap(tmp_path, max_file_size=200)
    loc = SitemapLoc("/" + "x" * 500)

    with pytest.raises(SerializationError):
        sm.add(loc)
    assert loc.location.startswith("/x")
    assert sm.next_sitemap is None


def test_deep_chain_does_not_recurse(tmp_path):
    sm = make_sitemap(tmp_path, max_urls=1)
    for i in range(2500):
        sm.add(SitemapLoc(f"/p{i}"))

    links = list(sm.links())
    assert len(links) == 2500
    assert links[-1].sequence == 2499
    assert links[-1].locs[0].location == f"{BASE_URL}/p2499"


def test_rename_after_split_renames_every_file(tmp_path):
    sm = make_sitemap(tmp_path, max_urls=2)
    sm.name = "fake_name_which_will_be_changed"
    for i in range(5):
        sm.add(SitemapLoc(f"/p{i}"))
    sm.name = "large"

    assert sm.save() == ["large.xml", "large1.xml", "large2.xml"]
    assert sorted(os.listdir(tmp_path)) == ["large.xml", "large1.xml", "large2.xml"]


def test_unnamed_sitemap_uses_default_name(tmp_path):
    sm = make_sitemap(tmp_path)
    sm.name = ""
    sm.add(SitemapLoc("/a"))

    assert sm.save() == ["sitemap.xml"]
    assert sm.save(default_name="sitemap3") == ["sitemap3.xml"]


def test_compressed_output_matches_plain(tmp_path, now):
    sm = make_sitemap(tmp_path, max_urls=2)
    for i in range(3):
        sm.add(SitemapLoc(f"/p{i}", last_modified=now, change_frequency="weekly"))

    plain = sm.save()
    sm.compress = True
    compressed = sm.save()

    assert compressed == ["large.xml.gz", "large1.xml.gz"]
    for plain_name, gz_name in zip(plain, compressed):
        assert gzip.decompress((tmp_path / gz_name).read_bytes()) == (tmp_path / plain_name).read_bytes()


def test_setters_cascade_along_chain(tmp_path):
    sm = make_sitemap(tmp_path, max_urls=1)
    sm.add(SitemapLoc("/a"))
    sm.add(SitemapLoc("/b"))
    sm.output_path = str(tmp_path / "nested" / "dir")
    sm.hostname = "https://cdn.example.com"
    sm.add(SitemapLoc("/c"))

    assert [link.output_path for link in sm.links()] == [str(tmp_path / "nested" / "dir")] * 3
    assert sm.next_sitemap.next_sitemap.locs[0].location == "https://cdn.example.com/c"
    sm.save()
    assert (tmp_path / "nested" / "dir" / "large2.xml").exists()


def test_size_settings_frozen_once_populated(tmp_path):
    sm = make_sitemap(tmp_path)
    sm.pretty_print = True
    sm.max_urls = 10
    sm.add(SitemapLoc("/a"))

    with pytest.raises(SitemapError):
        sm.pretty_print = False
    with pytest.raises(SitemapError):
        sm.max_file_size = 1000
    assert sm.pretty_print is True


def test_invalid_limits_rejected():
    with pytest.raises(SitemapError):
        Sitemap(options=SitemapOptions(max_urls=0))
    sm = Sitemap()
    with pytest.raises(SitemapError):
        sm.max_file_size = -1
    assert sm.max_file_size > 0


def test_options_are_copied():
    options = SitemapOptions(hostname=BASE_URL)
    sm = Sitemap(options=options)
    options.hostname = "https://other.example.com"

    assert sm.hostname == BASE_URL


def test_continuation_copies_configuration(tmp_path, now):
    sm = make_sitemap(tmp_path, max_urls=1, pretty_print=True)
    sm.last_modified = now
    sm.add(SitemapLoc("/a"))
    sm.add(SitemapLoc("/b"))

    cont = sm.next_sitemap
    assert cont.options == sm.options
    assert cont.options is not sm.options
    assert cont.last_modified == now
    assert cont.next_sitemap is None


def test_len_counts_entries_in_this_file_only(tmp_path):
    sm = make_sitemap(tmp_path, max_urls=2)
    assert len(sm) == 0
    for i in range(5):
        sm.add(SitemapLoc(f"/p{i}"))

    assert len(sm) == 2
    assert [len(link) for link in sm.links()] == [2, 2, 1]
    assert sum(len(link) for link in sm.links()) == sm.total_url_count == 5


def test_concurrent_adds_respect_both_limits(tmp_path):
    size, empty = record_size(tmp_path, "/t0-0000")
    max_file_size = empty + size * 3 + 1
    sm = make_sitemap(tmp_path, max_urls=4, max_file_size=max_file_size)
    workers, per_worker = 8, 50
    start = threading.Barrier(workers)

    def add_many(worker):
        start.wait()
        for i in range(per_worker):
            sm.add(SitemapLoc(f"/t{worker}-{i:04d}"))

    threads = [threading.Thread(target=add_many, args=(worker,)) for worker in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    links = list(sm.links())
    assert all(len(link) <= 4 for link in links)
    assert all(link.xml_size < max_file_size for link in links)
    assert all(link.count_xml_bytes() == link.xml_size for link in links)
    assert sm.total_url_count == workers * per_worker
    expected = {f"{BASE_URL}/t{worker}-{i:04d}" for worker in range(workers) for i in range(per_worker)}
    seen = [loc.location for link in links for loc in link.locs]
    assert len(seen) == len(expected)
    assert set(seen) == expected
