#!/usr/bin/env python3
"""
Unit tests for offering search filters and ordering.
"""

import unittest

from core.offering_search import OfferingSearch, SearchFilters, filter_offerings, is_eligible
from database.models import Offering, OfferingStatus, OfferingType
from tests import create_test_repo, make_provider, make_offering


def offering(name, **fields):
    defaults = dict(
        name=name,
        description="",
        category="",
        offering_type=OfferingType.SERVICE.value,
        min_price=100.0,
        max_price=200.0,
        features=[],
        tags=[],
        delivery_time="",
        availability_location="",
        status=OfferingStatus.ACTIVE.value,
        is_available=True,
    )
    defaults.update(fields)
    return Offering(**defaults)


class TestFilterOfferings(unittest.TestCase):
    """Pure filtering over unsaved offerings."""

    def test_01_max_price_compares_minimum_price(self):
        """An offering starting at 150 is excluded by a ceiling of 100."""
        cheap = offering("Cheap", min_price=50, max_price=500)
        pricey = offering("Pricey", min_price=150, max_price=150)

        results = filter_offerings([cheap, pricey], SearchFilters(max_price=100))

        self.assertEqual(results, [cheap])

    def test_02_term_searches_name_description_category_tags(self):
        by_name = offering("SEO básico")
        by_description = offering("Análisis", description="Incluye seo técnico")
        by_category = offering("Paquete", category="SEO y contenido")
        by_tag = offering("Blog", tags=["SEO"])
        unrelated = offering("Contabilidad")

        results = filter_offerings(
            [unrelated, by_tag, by_category, by_description, by_name], SearchFilters(term="seo")
        )

        self.assertEqual(len(results), 4)
        self.assertNotIn(unrelated, results)

    def test_03_term_ordering(self):
        exact = offering("SEO")
        contains = offering("Auditoría SEO")
        other_b = offering("Blog corporativo", tags=["seo"])
        other_a = offering("Análisis web", description="incluye SEO")

        results = filter_offerings([other_b, contains, other_a, exact], SearchFilters(term="Seo"))

        self.assertEqual(results, [exact, contains, other_a, other_b])

    def test_04_no_term_sorts_alphabetically(self):
        b = offering("beta")
        a = offering("Alpha")
        self.assertEqual(filter_offerings([b, a]), [a, b])

    def test_05_inactive_and_unavailable_are_never_returned(self):
        inactive = offering("Inactive", status=OfferingStatus.INACTIVE.value)
        unavailable = offering("Unavailable", is_available=False)

        self.assertFalse(is_eligible(inactive))
        self.assertFalse(is_eligible(unavailable))
        self.assertEqual(filter_offerings([inactive, unavailable]), [])
        self.assertEqual(filter_offerings([unavailable], SearchFilters(is_available=False)), [])

    def test_06_features_and_tags_are_any_of(self):
        both = offering("Both", features=["Reportes mensuales", "Soporte"], tags=["pyme"])
        neither = offering("Neither", features=["Otra cosa"], tags=["corporativo"])

        by_feature = filter_offerings([both, neither], SearchFilters(features=["reportes", "nada"]))
        by_tag = filter_offerings([both, neither], SearchFilters(tags=["PYME"]))

        self.assertEqual(by_feature, [both])
        self.assertEqual(by_tag, [both])

    def test_07_category_type_delivery_location(self):
        target = offering(
            "Target",
            category="Marketing digital",
            offering_type=OfferingType.PRODUCT.value,
            delivery_time="2 semanas",
            availability_location="Ciudad de México, CDMX",
        )
        service = offering("Service", category="Marketing digital")

        filters = SearchFilters(
            category="marketing",
            offering_type=OfferingType.PRODUCT.value,
            delivery_time="semanas",
            location="ciudad de méxico",
        )

        self.assertEqual(filter_offerings([target, service], filters), [target])


class TestOfferingSearch(unittest.TestCase):
    """Search against the offering repository."""

    def setUp(self):
        self.repo = create_test_repo()
        self.provider = make_provider(self.repo)
        self.service = make_offering(self.repo, self.provider, name="Diseño de logotipo", category="Diseño")
        self.product = make_offering(
            self.repo,
            self.provider,
            name="Tarjetas de presentación",
            offering_type=OfferingType.PRODUCT.value,
            category="Diseño",
            min_price=150.0,
            max_price=150.0,
        )
        self.search = OfferingSearch(self.repo)

    def tearDown(self):
        self.repo.db.close()

    def test_01_returns_offering_provider_pairs(self):
        results = self.search.search(SearchFilters(category="diseño"))

        self.assertEqual([o.id for o, _ in results], [self.service.id, self.product.id])
        self.assertTrue(all(p.id == self.provider.id for _, p in results))

    def test_02_keyword_filters(self):
        results = self.search.search(offering_type=OfferingType.PRODUCT.value)
        self.assertEqual([o.id for o, _ in results], [self.product.id])

    def test_03_no_filters_returns_all_eligible(self):
        self.assertEqual(len(self.search.search()), 2)

    def test_04_empty_catalog(self):
        self.assertEqual(OfferingSearch(create_test_repo()).search(SearchFilters(term="x")), [])


if __name__ == '__main__':
    unittest.main()
