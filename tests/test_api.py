"""HTTP tests for the JSON API."""
import unittest

from tests.base import SamityTestCase


class ApiTestCase(SamityTestCase):
    """Signed in as an admin; Karim is an ordinary member."""

    def setUp(self):
        super().setUp()
        self.admin = self.make_member(phone='01700000009', name='Office Admin',
                                      role='admin', password='admin9')
        self.admin.id  # load before the instance is detached
        # Requests must not share the test's app context (Flask-Login caches
        # the current user on it), so release it once seeding is done.
        self.ctx.pop()
        self.login(self.client, '01700000009', 'admin9')

        response = self.client.post('/api/members', json={
            'name': 'Karim Uddin',
            'phone': '01812345678',
            'address': 'Cumilla',
            'nid': '19881234',
            'savings': 15000,
            'shares': 3,
            'password': 'karim1',
        })
        self.assertEqual(response.status_code, 201)
        self.member = response.get_json()['member']

    def tearDown(self):
        self.ctx.push()
        super().tearDown()

    def login(self, client, username, password):
        response = client.post('/api/auth/login',
                               json={'username': username, 'password': password})
        self.assertEqual(response.status_code, 200)
        return client

    def member_client(self):
        return self.login(self.app.test_client(), '01812345678', 'karim1')


class TestMembersApi(ApiTestCase):

    def test_list_and_show(self):
        listing = self.client.get('/api/members').get_json()
        self.assertEqual([m['id'] for m in listing], [self.admin.id, self.member['id']])

        member = self.client.get(f"/api/members/{self.member['id']}").get_json()
        self.assertEqual(member['phone'], '01812345678')
        self.assertEqual(member['loanBalance'], 0)
        self.assertEqual(member['role'], 'user')

    def test_active_filter(self):
        self.client.post(f"/api/members/{self.member['id']}/toggle-status")

        active = self.client.get('/api/members?active=true').get_json()
        self.assertEqual([m['id'] for m in active], [self.admin.id])
        inactive = self.client.get('/api/members?active=false').get_json()
        self.assertEqual([m['id'] for m in inactive], [self.member['id']])

    def test_empty_active_filter_lists_everyone(self):
        self.client.post(f"/api/members/{self.member['id']}/toggle-status")

        listing = self.client.get('/api/members?active=').get_json()
        self.assertEqual(len(listing), 2)

    def test_missing_member_is_404(self):
        response = self.client.get('/api/members/999')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['error'], 'NotFoundError')

    def test_patch_profile(self):
        response = self.client.patch(f"/api/members/{self.member['id']}",
                                     json={'address': 'Feni', 'dividend': 1200})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['address'], 'Feni')
        self.assertEqual(response.get_json()['dividend'], 1200)

    def test_patch_balance_is_400(self):
        response = self.client.patch(f"/api/members/{self.member['id']}",
                                     json={'savings': 1})
        self.assertEqual(response.status_code, 400)

    def test_duplicate_phone_is_400(self):
        response = self.client.post('/api/members', json={
            'name': 'Other', 'phone': '01812345678', 'address': 'X'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error'], 'DuplicateError')

    def test_toggle_status(self):
        response = self.client.post(f"/api/members/{self.member['id']}/toggle-status")
        self.assertFalse(response.get_json()['isActive'])

    def test_summaries(self):
        summary = self.client.get(f"/api/members/{self.member['id']}/summary").get_json()
        self.assertEqual(summary['shareValue'], 300)
        self.assertEqual(summary['annualInterest'], 900)

        totals = self.client.get('/api/summary').get_json()
        self.assertEqual(totals['totalMembers'], 2)
        self.assertEqual(totals['totalSavings'], 15000)


class TestTransactionsApi(ApiTestCase):

    def test_deposit(self):
        response = self.client.post('/api/transactions', json={
            'memberId': self.member['id'],
            'type': 'deposit',
            'amount': 5000,
            'date': '2025-02-01',
            'description': 'Monthly deposit',
        })
        self.assertEqual(response.status_code, 201)
        tx = response.get_json()
        self.assertEqual(tx['type'], 'deposit')
        self.assertEqual(tx['date'], '2025-02-01')
        self.assertEqual(tx['memberName'], 'Karim Uddin')

        member = self.client.get(f"/api/members/{self.member['id']}").get_json()
        self.assertEqual(member['savings'], 20000)

    def test_invalid_amount_is_400(self):
        response = self.client.post('/api/transactions', json={
            'memberId': self.member['id'], 'type': 'deposit', 'amount': 0})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error'], 'ValidationError')

    def test_unknown_member_is_404(self):
        response = self.client.post('/api/transactions', json={
            'memberId': 404, 'type': 'deposit', 'amount': 10})
        self.assertEqual(response.status_code, 404)

    def test_non_json_body_is_400(self):
        response = self.client.post('/api/transactions', data='amount=5')
        self.assertEqual(response.status_code, 400)

    def test_filter_by_member(self):
        other = self.client.post('/api/members', json={
            'name': 'Salma', 'phone': '01900000000', 'address': 'Bogura'}).get_json()['member']
        self.client.post('/api/transactions', json={
            'memberId': self.member['id'], 'type': 'deposit', 'amount': 10, 'date': '2025-01-01'})
        self.client.post('/api/transactions', json={
            'memberId': other['id'], 'type': 'deposit', 'amount': 20, 'date': '2025-01-02'})

        everyone = self.client.get('/api/transactions').get_json()
        self.assertEqual([t['amount'] for t in everyone], [20, 10])

        mine = self.client.get(f"/api/transactions?memberId={self.member['id']}").get_json()
        self.assertEqual([t['amount'] for t in mine], [10])


class TestLoansApi(ApiTestCase):

    def apply(self, **overrides):
        body = {'memberId': self.member['id'], 'amount': 50000,
                'purpose': 'Rickshaw', 'duration': 12}
        body.update(overrides)
        return self.client.post('/api/loans', json=body)

    def test_apply_and_approve(self):
        response = self.apply()
        self.assertEqual(response.status_code, 201)
        loan = response.get_json()
        self.assertEqual(loan['status'], 'pending')
        self.assertIsNone(loan['monthlyInstallment'])

        response = self.client.patch(f"/api/loans/{loan['id']}", json={'status': 'approved'})
        self.assertEqual(response.status_code, 200)
        approved = response.get_json()
        self.assertEqual(approved['status'], 'approved')
        self.assertEqual(approved['monthlyInstallment'], 4667)
        self.assertIsNotNone(approved['approvedDate'])

        member = self.client.get(f"/api/members/{self.member['id']}").get_json()
        self.assertEqual(member['loanBalance'], 50000)

        txs = self.client.get(f"/api/transactions?memberId={self.member['id']}").get_json()
        self.assertEqual([t['type'] for t in txs], ['loan_disbursement'])

    def test_second_approval_is_rejected(self):
        loan = self.apply().get_json()
        self.client.patch(f"/api/loans/{loan['id']}", json={'status': 'approved'})
        response = self.client.patch(f"/api/loans/{loan['id']}", json={'status': 'approved'})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json()['error'], 'InvalidStateError')

    def test_reject(self):
        loan = self.apply().get_json()
        response = self.client.patch(f"/api/loans/{loan['id']}", json={'status': 'rejected'})
        self.assertEqual(response.get_json()['status'], 'rejected')
        member = self.client.get(f"/api/members/{self.member['id']}").get_json()
        self.assertEqual(member['loanBalance'], 0)

    def test_over_maximum_is_400(self):
        response = self.apply(amount=600000)
        self.assertEqual(response.status_code, 400)

    def test_missing_loan_is_404(self):
        response = self.client.patch('/api/loans/31337', json={'status': 'approved'})
        self.assertEqual(response.status_code, 404)

    def test_list_by_status(self):
        first = self.apply().get_json()
        self.apply(amount=1000).get_json()
        self.client.patch(f"/api/loans/{first['id']}", json={'status': 'rejected'})
        rejected = self.client.get('/api/loans?status=rejected').get_json()
        self.assertEqual([l['id'] for l in rejected], [first['id']])

    def test_estimate(self):
        body = self.client.get('/api/loans/estimate?amount=50000&duration=12').get_json()
        self.assertEqual(body['monthlyInstallment'], 4667)

        body = self.client.get('/api/loans/estimate?amount=50000&duration=0').get_json()
        self.assertIsNone(body['monthlyInstallment'])


class TestSettingsApi(ApiTestCase):

    def test_read_and_update(self):
        self.assertEqual(self.client.get('/api/settings').get_json()['sharePrice'], 100)

        response = self.client.patch('/api/settings', json={'sharePrice': 200})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['sharePrice'], 200)

        summary = self.client.get(f"/api/members/{self.member['id']}/summary").get_json()
        self.assertEqual(summary['shareValue'], 600)

    def test_invalid_update_is_400(self):
        response = self.client.patch('/api/settings', json={'sharePrice': -1})
        self.assertEqual(response.status_code, 400)


class TestBulletinApi(ApiTestCase):

    def test_notice_round(self):
        response = self.client.post('/api/notices', json={'title': 'AGM', 'content': 'Saturday'})
        self.assertEqual(response.status_code, 201)
        notices = self.client.get('/api/notices').get_json()
        self.assertEqual(notices[0]['title'], 'AGM')
        self.assertFalse(notices[0]['isUrgent'])

    def test_event_requires_date(self):
        response = self.client.post('/api/events', json={
            'title': 'Meeting', 'description': 'Monthly', 'time': '10:00', 'venue': 'Office'})
        self.assertEqual(response.status_code, 400)


class TestAuthApi(ApiTestCase):

    def test_login_me_logout(self):
        client = self.app.test_client()
        self.assertEqual(client.get('/api/auth/me').status_code, 401)

        response = client.post('/api/auth/login',
                               json={'username': '01812345678', 'password': 'karim1'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['member']['id'], self.member['id'])

        me = client.get('/api/auth/me').get_json()
        self.assertEqual(me['user']['username'], '01812345678')

        self.assertEqual(client.post('/api/auth/logout').status_code, 200)
        self.assertEqual(client.get('/api/auth/me').status_code, 401)

    def test_bad_credentials_is_401(self):
        response = self.client.post('/api/auth/login',
                                    json={'username': '01812345678', 'password': 'nope'})
        self.assertEqual(response.status_code, 401)

    def test_register(self):
        response = self.app.test_client().post('/api/auth/register',
                                               json={'username': 'auditor', 'password': 'pw'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['role'], 'user')

    def test_anonymous_cannot_register_admin(self):
        response = self.app.test_client().post('/api/auth/register', json={
            'username': 'intruder', 'password': 'pw', 'role': 'admin'})
        self.assertEqual(response.status_code, 403)

    def test_admin_can_register_admin(self):
        response = self.client.post('/api/auth/register', json={
            'username': 'treasurer', 'password': 'pw', 'role': 'admin'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()['role'], 'admin')

    def test_changed_phone_becomes_login(self):
        self.client.patch(f"/api/members/{self.member['id']}", json={'phone': '01899999999'})

        client = self.app.test_client()
        response = client.post('/api/auth/login',
                               json={'username': '01899999999', 'password': 'karim1'})
        self.assertEqual(response.status_code, 200)

        response = self.client.post('/api/members', json={
            'name': 'New Karim', 'phone': '01812345678', 'address': 'Cumilla'})
        self.assertEqual(response.status_code, 201)


class TestAccessControl(ApiTestCase):

    def test_anonymous_settings_patch_is_401(self):
        response = self.app.test_client().patch('/api/settings', json={'sharePrice': 1})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.client.get('/api/settings').get_json()['sharePrice'], 100)

    def test_anonymous_reads_are_401(self):
        client = self.app.test_client()
        for url in ('/api/members', '/api/transactions', '/api/loans',
                    '/api/settings', '/api/notices', '/api/events', '/api/summary'):
            self.assertEqual(client.get(url).status_code, 401, url)

    def test_anonymous_transaction_is_401(self):
        response = self.app.test_client().post('/api/transactions', json={
            'memberId': self.member['id'], 'type': 'deposit', 'amount': 1000})
        self.assertEqual(response.status_code, 401)
        member = self.client.get(f"/api/members/{self.member['id']}").get_json()
        self.assertEqual(member['savings'], 15000)

    def test_member_cannot_use_admin_writes(self):
        client = self.member_client()
        mid = self.member['id']
        attempts = [
            client.patch('/api/settings', json={'sharePrice': 1}),
            client.post('/api/transactions', json={
                'memberId': mid, 'type': 'deposit', 'amount': 1000}),
            client.patch(f'/api/members/{mid}', json={'dividend': 99999}),
            client.post(f'/api/members/{mid}/toggle-status'),
            client.post('/api/members', json={
                'name': 'Ghost', 'phone': '01955555555', 'address': 'X'}),
            client.post('/api/notices', json={'title': 'Fake', 'content': 'x'}),
        ]
        for response in attempts:
            self.assertEqual(response.status_code, 403)
            self.assertEqual(response.get_json()['error'], 'AuthorizationError')

    def test_member_cannot_approve_loans(self):
        client = self.member_client()
        loan = client.post('/api/loans', json={
            'memberId': self.member['id'], 'amount': 1000,
            'purpose': 'Seeds', 'duration': 6}).get_json()

        response = client.patch(f"/api/loans/{loan['id']}", json={'status': 'approved'})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.get(f"/api/loans/{loan['id']}").get_json()['status'],
                         'pending')

    def test_member_applies_only_for_self(self):
        response = self.member_client().post('/api/loans', json={
            'memberId': self.admin.id, 'amount': 1000, 'purpose': 'Seeds', 'duration': 6})
        self.assertEqual(response.status_code, 403)

    def test_member_sees_only_own_ledger(self):
        self.client.post('/api/transactions', json={
            'memberId': self.member['id'], 'type': 'deposit', 'amount': 10})
        self.client.post('/api/transactions', json={
            'memberId': self.admin.id, 'type': 'deposit', 'amount': 20})

        client = self.member_client()
        mine = client.get('/api/transactions').get_json()
        self.assertEqual([t['amount'] for t in mine], [10])

        response = client.get(f'/api/transactions?memberId={self.admin.id}')
        self.assertEqual(response.status_code, 403)


class TestErrorHandling(ApiTestCase):

    def test_unknown_route_is_json_404(self):
        response = self.client.get('/api/nowhere')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['status'], 'error')


if __name__ == '__main__':
    unittest.main()
