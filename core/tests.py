"""
VEE4 Core Tests
===============

Tests for:
1. Custom User Model (creation, roles, admin roster)
2. Account API (me, customer roster)
3. API error envelope
4. Health endpoints
"""

import uuid
from unittest.mock import patch, MagicMock

from django.test import TestCase, RequestFactory
from rest_framework.exceptions import NotAuthenticated
from rest_framework.test import APIClient

from core.exceptions import api_exception_handler
from core.models import User, UserRole
from orders.exceptions import PreconditionError, NotFoundError
from orders.models import OrderStatus
from orders.tests.helpers import make_order


class TestUserModel(TestCase):
    """Tests for the custom User model."""

    def setUp(self):
        self.admin = User.objects.create_user(
            email='admin@vee4group.com',
            password='testpass123',
            role=UserRole.ADMIN,
            name='Admin Test',
        )
        self.customer = User.objects.create_user(
            email='Buyer@Example.COM',
            password='testpass123',
            name='Customer Test',
            company_name='Test Fabricators',
        )

    # ==========================================
    # User Creation Tests
    # ==========================================

    def test_user_creation_with_email(self):
        """Email is the login identifier; the domain part is normalised."""
        self.assertEqual(self.customer.email, 'Buyer@example.com')
        self.assertTrue(self.customer.check_password('testpass123'))

    def test_user_uuid_primary_key(self):
        self.assertIsInstance(self.customer.id, uuid.UUID)

    def test_default_role_is_customer(self):
        self.assertEqual(self.customer.role, UserRole.CUSTOMER)
        self.assertTrue(self.customer.is_customer)
        self.assertFalse(self.customer.is_admin)

    def test_email_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', name='Nobody')

    def test_superuser_creation(self):
        """Superuser should be a staff administrator."""
        superuser = User.objects.create_superuser(
            email='root@vee4group.com',
            password='superpass123',
            name='Root',
        )
        self.assertTrue(superuser.is_staff)
        self.assertTrue(superuser.is_superuser)
        self.assertEqual(superuser.role, UserRole.ADMIN)

    def test_display_names(self):
        """Admins appear under the organisation name in conversations."""
        self.assertEqual(self.admin.display_name, 'Vee4 Admin')
        self.assertEqual(self.customer.display_name, 'Customer Test')

    def test_admin_roster_excludes_inactive(self):
        blocked = User.objects.create_user(
            email='old-admin@vee4group.com', role=UserRole.ADMIN, name='Old', is_active=False
        )
        roster = list(User.objects.admins())
        self.assertIn(self.admin, roster)
        self.assertNotIn(blocked, roster)
        self.assertNotIn(self.customer, roster)


class TestAccountApi(TestCase):

    def setUp(self):
        self.admin = User.objects.create_user(email='admin@vee4group.com', role=UserRole.ADMIN, name='Admin')
        self.customer = User.objects.create_user(email='buyer@example.com', name='Buyer', company_name='Acme')
        self.client = APIClient()

    def test_me(self):
        self.client.force_authenticate(user=self.customer)
        response = self.client.get('/api/v1/auth/me/')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['user']['email'], 'buyer@example.com')

    def test_customer_roster_with_order_counts(self):
        make_order(self.customer, number='ORD-2025-01')
        make_order(self.customer, number='ORD-2025-02', status=OrderStatus.COMPLETED)
        self.client.force_authenticate(user=self.admin)

        response = self.client.get('/api/v1/admin/customers/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data['customers']), 1)
        self.assertEqual(response.data['customers'][0]['order_count'], 2)

    def test_customer_roster_admin_only(self):
        self.client.force_authenticate(user=self.customer)
        response = self.client.get('/api/v1/admin/customers/')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data, {'success': False, 'message': 'Access denied. Admin only.'})

    def test_token_obtain(self):
        User.objects.create_user(email='login@example.com', password='s3cret-pass', name='Login')
        response = self.client.post(
            '/api/v1/auth/token/', {'email': 'login@example.com', 'password': 's3cret-pass'}, format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.data)


class TestExceptionHandler(TestCase):

    def context(self):
        return {'view': MagicMock(), 'request': RequestFactory().get('/')}

    def test_workflow_error_status_and_envelope(self):
        response = api_exception_handler(PreconditionError('designing', 'approved'), self.context())

        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.data,
            {'success': False, 'message': "Cannot move order from 'designing' to 'approved'."}
        )

    def test_not_found(self):
        response = api_exception_handler(NotFoundError(), self.context())
        self.assertEqual(response.status_code, 404)

    def test_drf_errors_reshaped(self):
        response = api_exception_handler(NotAuthenticated(), self.context())

        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.data['success'])
        self.assertIn('credentials', response.data['message'])

    def test_unknown_errors_left_to_django(self):
        self.assertIsNone(api_exception_handler(KeyError('boom'), self.context()))


class TestHealthEndpoints(TestCase):

    def test_liveness(self):
        response = self.client.get('/health/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['service'], 'vee4-orders')

    def test_readiness_without_workers_is_degraded_not_down(self):
        inspector = MagicMock()
        inspector.ping.return_value = None
        with patch('vee4_core.celery.app.control.inspect', return_value=inspector):
            response = self.client.get('/health/ready/')

        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body['checks']['database']['status'], 'healthy')
        self.assertEqual(body['checks']['celery']['status'], 'degraded')

    def test_readiness_cache_down(self):
        inspector = MagicMock()
        inspector.ping.return_value = {'worker@host': {'ok': 'pong'}}
        with patch('vee4_core.celery.app.control.inspect', return_value=inspector), \
                patch('core.health.cache') as mock_cache:
            mock_cache.set.side_effect = ConnectionError('redis down')
            response = self.client.get('/health/ready/')

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['checks']['cache']['status'], 'unhealthy')
