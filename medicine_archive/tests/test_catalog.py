#!/usr/bin/env python3
"""
Catalog Tests
=============

Link discovery on the Medicines A to Z index page.

Run:
    python -m unittest medicine_archive.tests.test_catalog
"""

import unittest

from medicine_archive.catalog import LinkCatalogBuilder
from medicine_archive.documents import HtmlDocument
from medicine_archive.models import ItemLink
from medicine_archive.tests.fixtures import INDEX_URL, index_page, medicine_url


def build(anchors):
    document = HtmlDocument(index_page(anchors), INDEX_URL)
    return LinkCatalogBuilder().build(document)


class TestCatalogBuilder(unittest.TestCase):

    def test_duplicate_url_keeps_named_entry(self):
        for anchors in (
            [("/medicines/aspirin/", ""), ("/medicines/aspirin/", "Aspirin")],
            [("/medicines/aspirin/", "Aspirin"), ("/medicines/aspirin/", "")],
        ):
            links = build(anchors)
            self.assertEqual(links, [ItemLink(canonical_url=medicine_url("aspirin"), name="Aspirin")])

    def test_first_accepted_name_wins(self):
        links = build([
            ("/medicines/aspirin/", "Aspirin"),
            ("/medicines/aspirin/", "Aspirin for pain"),
        ])
        self.assertEqual([l.name for l in links], ["Aspirin"])

    def test_index_anchor_excluded(self):
        links = build([
            ("/medicines/", "All medicines"),
            ("https://www.nhs.uk/medicines/", "Medicines home"),
            ("#maincontent", "Skip to main content"),
            ("/medicines/#A", "Medicines starting with A"),
            ("/medicines/acrivastine/", "Acrivastine"),
        ])
        self.assertEqual([l.canonical_url for l in links], [medicine_url("acrivastine")])

    def test_links_outside_base_path_excluded(self):
        links = build([
            ("/conditions/fever/", "Fever"),
            ("https://www.example.com/", "Example"),
            ("/medicines/adalimumab/", "Adalimumab"),
        ])
        self.assertEqual([l.name for l in links], ["Adalimumab"])

    def test_name_filters(self):
        links = build([
            ("/medicines/a-to-z/", "Medicines A to Z"),
            ("/medicines/acid/", "Overview - Acid reflux medicines"),
            ("/medicines/co-codamol/", "Codeine, see co-codamol"),
            ("/medicines/x/", "X"),
            ("/medicines/long/", "L" + "o" * 100 + "ng"),
            ("/medicines/amitriptyline/", "Amitriptyline  for\n depression"),
        ])
        self.assertEqual(len(links), 1)
        self.assertEqual(links[0].name, "Amitriptyline for depression")

    def test_relative_links_resolved_in_encounter_order(self):
        links = build([
            ("/medicines/zopiclone/", "Zopiclone"),
            ("aciclovir/", "Aciclovir"),
            ("https://www.nhs.uk/medicines/zopiclone/", "Zopiclone"),
            ("/medicines/baclofen/#side-effects", "Baclofen"),
        ])
        self.assertEqual(
            [l.canonical_url for l in links],
            [medicine_url("zopiclone"), medicine_url("aciclovir"), medicine_url("baclofen")],
        )


if __name__ == "__main__":
    unittest.main()
