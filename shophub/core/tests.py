"""
Test suite for Core module
Tests: registration, shopper/admin login, token refresh, profile, password
change, admin user management, audit logs, pagination and health
"""
from django.contrib.auth import get_user_model
from django.test import TestCase, RequestFactory
from rest_framework import status
from rest_framework.request import Request
from rest_framework_simplejwt.tokens import AccessToken
from shophub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from shophub.core.models import AuditLog
from shophub.core.utils import create_audit_log, paginate

User = get_user_model()


class UserModelTests(TestCase):
    """Test the email-based user model"""

    def test_create_user_normalizes_email(self):
        """Test email domain is lower-cased and password hashed"""
        user = User.objects.create_user(email='Jane@EXAMPLE.com', password='secret123', name='Jane')
        self.assertEqual(user.email, 'Jane@example.com')
        self.assertTrue(user.check_password('secret123'))
        self.assertFalse(user.is_staff)

    def test_create_superuser(self):
        """Test superusers are staff"""
        user = User.objects.create_superuser(email='root@test.com', password='secret123', name='Root')
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)

    def test_create_user_requires_email(self):
        """Test email is mandatory"""
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='secret123', name='Nobody')


class AuthAPITests(TestCase):
    """Test shopper authentication endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(email='shopper@test.com', name='Shopper', password='secret123')

    def test_register(self):
        """Test successful registration returns user and tokens"""
        response = self.client.post('/api/auth/register/', {
            'email': 'new@test.com', 'password': 'secret123', 'name': 'New User'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['email'], 'new@test.com')
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(AccessToken(response.data['access'])['type'], 'user')

    def test_register_duplicate_email(self):
        """Test duplicate email is rejected"""
        response = self.client.post('/api/auth/register/', {
            'email': 'shopper@test.com', 'password': 'secret123', 'name': 'Again'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Email already registered')

    def test_register_validation(self):
        """Test short password and name are rejected"""
        response = self.client.post('/api/auth/register/', {
            'email': 'bad@test.com', 'password': '123', 'name': 'X'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data['details'])
        self.assertIn('name', response.data['details'])

    def test_login(self):
        """Test login with email and password"""
        response = self.client.post('/api/auth/login/', {
            'email': 'shopper@test.com', 'password': 'secret123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['name'], 'Shopper')
        token = AccessToken(response.data['access'])
        self.assertEqual(token['type'], 'user')
        self.assertEqual(token['email'], 'shopper@test.com')

    def test_login_bad_credentials(self):
        """Test wrong password returns 401"""
        response = self.client.post('/api/auth/login/', {
            'email': 'shopper@test.com', 'password': 'wrong-pass'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        """Test refresh token yields a new access token"""
        login = self.client.post('/api/auth/login/', {
            'email': 'shopper@test.com', 'password': 'secret123'
        }, format='json')
        response = self.client.post('/api/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_deleted_user(self):
        """Test refresh tokens of deleted users are rejected"""
        login = self.client.post('/api/auth/login/', {
            'email': 'shopper@test.com', 'password': 'secret123'
        }, format='json')
        self.user.delete()
        response = self.client.post('/api/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        """Test current user profile"""
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'shopper@test.com')

    def test_me_requires_authentication(self):
        """Test anonymous access returns 401"""
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_profile(self):
        """Test shipping details update; email stays read-only"""
        self.client.authenticate_user(self.user)
        response = self.client.put('/api/auth/profile/', {
            'city': 'Springfield', 'zip': '12345', 'email': 'hijack@test.com'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.city, 'Springfield')
        self.assertEqual(self.user.email, 'shopper@test.com')

    def test_change_password(self):
        """Test password change with correct current password"""
        self.client.authenticate_user(self.user)
        response = self.client.put('/api/auth/password/', {
            'current_password': 'secret123', 'new_password': 'newsecret456'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newsecret456'))

    def test_change_password_wrong_current(self):
        """Test wrong current password is rejected"""
        self.client.authenticate_user(self.user)
        response = self.client.put('/api/auth/password/', {
            'current_password': 'nope-nope', 'new_password': 'newsecret456'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Current password is incorrect')


class AdminAuthAPITests(TestCase):
    """Test back-office login"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin(email='boss@test.com', password='secret123')
        self.user = TestDataFactory.create_user(email='shopper@test.com', password='secret123')

    def test_admin_login(self):
        """Test staff login returns admin payload and admin token"""
        response = self.client.post('/api/admin/auth/login/', {
            'email': 'boss@test.com', 'password': 'secret123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['admin']['email'], 'boss@test.com')
        self.assertEqual(AccessToken(response.data['access'])['type'], 'admin')

    def test_admin_login_non_staff(self):
        """Test shoppers cannot log in to the back office"""
        response = self.client.post('/api/admin/auth/login/', {
            'email': 'shopper@test.com', 'password': 'secret123'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_admin_me(self):
        """Test current admin endpoint"""
        self.client.authenticate_admin(self.admin)
        response = self.client.get('/api/admin/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'boss@test.com')

        self.client.authenticate_user(self.user)
        response = self.client.get('/api/admin/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AdminUserAPITests(TestCase):
    """Test admin user management"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.client.authenticate_admin(self.admin)

    def test_create_user(self):
        """Test creating a staff account"""
        response = self.client.post('/api/admin/users/', {
            'email': 'clerk@test.com', 'password': 'secret123', 'name': 'Clerk', 'is_staff': True
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email='clerk@test.com')
        self.assertTrue(user.is_staff)
        self.assertTrue(user.check_password('secret123'))
        self.assertTrue(AuditLog.objects.filter(action='user_create').exists())

    def test_list_and_search_users(self):
        """Test user listing with search"""
        TestDataFactory.create_user(email='findme@test.com')
        response = self.client.get('/api/admin/users/?search=findme')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['users']), 1)
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_cannot_delete_self(self):
        """Test admins cannot delete their own account"""
        response = self.client.delete(f'/api/admin/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_user(self):
        """Test deleting another user"""
        user = TestDataFactory.create_user()
        response = self.client.delete(f'/api/admin/users/{user.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=user.pk).exists())

    def test_audit_log_filters(self):
        """Test audit log list filtered by action"""
        create_audit_log(action='order_create', model_name='Order', object_id='1', user=self.admin)
        create_audit_log(action='favorite_add', model_name='Favorite', object_id='2', user=self.admin)
        response = self.client.get('/api/admin/audit-logs/?action=order_create')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([log['action'] for log in response.data['logs']], ['order_create'])
        self.assertEqual(response.data['logs'][0]['user_email'], self.admin.email)

        log_id = response.data['logs'][0]['id']
        response = self.client.get(f'/api/admin/audit-logs/{log_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class UtilsTests(TestCase):
    """Test shared helpers"""

    def setUp(self):
        self.factory = RequestFactory()
        for i in range(25):
            TestDataFactory.create_user(email=f'user{i}@test.com')

    def _request(self, query=''):
        return Request(self.factory.get(f'/?{query}'))

    def test_paginate_defaults(self):
        """Test default page and limit"""
        items, pagination = paginate(self._request(), User.objects.order_by('id'), default_limit=10)
        self.assertEqual(len(items), 10)
        self.assertEqual(pagination, {'page': 1, 'limit': 10, 'total': 25, 'total_pages': 3})

    def test_paginate_last_page(self):
        """Test partial last page"""
        items, pagination = paginate(self._request('page=3&limit=10'), User.objects.order_by('id'))
        self.assertEqual(len(items), 5)
        self.assertEqual(pagination['page'], 3)

    def test_paginate_invalid_values(self):
        """Test invalid values fall back to defaults and limit is capped"""
        items, pagination = paginate(self._request('page=abc&limit=-4'), User.objects.order_by('id'), default_limit=7)
        self.assertEqual(pagination['page'], 1)
        self.assertEqual(pagination['limit'], 7)

        items, pagination = paginate(self._request('limit=1000'), User.objects.order_by('id'))
        self.assertEqual(pagination['limit'], 100)

    def test_paginate_past_end(self):
        """Test pages beyond the end are empty"""
        items, pagination = paginate(self._request('page=9&limit=10'), User.objects.order_by('id'))
        self.assertEqual(list(items), [])
        self.assertEqual(pagination['total'], 25)

    def test_paginate_empty_queryset(self):
        """Test empty result has no pages"""
        items, pagination = paginate(self._request(), User.objects.none())
        self.assertEqual(items, [])
        self.assertEqual(pagination, {'page': 1, 'limit': 20, 'total': 0, 'total_pages': 0})

    def test_create_audit_log_missing_fields(self):
        """Test incomplete audit entries are skipped, not raised"""
        self.assertIsNone(create_audit_log(action='order_create'))
        self.assertEqual(AuditLog.objects.count(), 0)


class HealthTests(TestCase):
    """Test health endpoint"""

    def test_health(self):
        response = self.client.get('/api/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ok')
        self.assertIn('timestamp', response.data)
