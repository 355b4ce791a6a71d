"""
Tests for the OTP email verification flow
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import otp

STUDENT_EMAIL = 'student@vitstudent.ac.in'


class TestRequestOtp:

    def test_domain_not_allowed(self, client: TestClient, mongo_db, sent_emails):
        response = client.post('/api/auth/otp', json={'email': 'student@gmail.com'})

        assert response.status_code == 400
        assert 'vitstudent.ac.in' in response.json()['message']
        assert mongo_db['otp'].count_documents({}) == 0
        assert sent_emails == []

    @pytest.mark.parametrize('email', ['', '@vitstudent.ac.in', 'student@vitstudent.ac.in.evil.com'])
    def test_malformed_emails(self, client: TestClient, sent_emails, email):
        response = client.post('/api/auth/otp', json={'email': email})
        assert response.status_code == 400

    def test_code_issued_with_ten_minute_expiry(self, client: TestClient, mongo_db, sent_emails):
        response = client.post('/api/auth/otp', json={'email': STUDENT_EMAIL})

        assert response.status_code == 200
        record = mongo_db['otp'].find_one({'email': STUDENT_EMAIL})
        assert record is not None
        assert len(record['otp']) == 6 and record['otp'].isdigit()
        assert record['expiresAt'] - record['createdAt'] == timedelta(minutes=10)

        assert len(sent_emails) == 1
        assert sent_emails[0]['to'] == STUDENT_EMAIL
        assert record['otp'] in sent_emails[0]['text']

    def test_resend_replaces_code(self, client: TestClient, mongo_db, sent_emails, monkeypatch):
        codes = iter(['111111', '222222'])
        monkeypatch.setattr(otp, 'generate_code', lambda: next(codes))

        client.post('/api/auth/otp', json={'email': STUDENT_EMAIL})
        client.post('/api/auth/otp', json={'email': STUDENT_EMAIL})

        assert mongo_db['otp'].count_documents({'email': STUDENT_EMAIL}) == 1
        assert mongo_db['otp'].find_one({'email': STUDENT_EMAIL})['otp'] == '222222'

    def test_email_is_normalized(self, client: TestClient, mongo_db, sent_emails):
        client.post('/api/auth/otp', json={'email': '  Student@VITstudent.ac.in '})
        assert mongo_db['otp'].find_one({'email': STUDENT_EMAIL}) is not None

    def test_delivery_failure(self, client: TestClient, monkeypatch):
        def broken_send(*args, **kwargs):
            raise OSError('connection refused')

        monkeypatch.setattr(otp.email_service, 'send_email', broken_send)
        response = client.post('/api/auth/otp', json={'email': STUDENT_EMAIL})

        assert response.status_code == 500
        assert response.json() == {'message': 'Failed to send OTP'}


class TestVerifyOtp:

    def issue(self, client, monkeypatch, code='123456'):
        monkeypatch.setattr(otp, 'generate_code', lambda: code)
        client.post('/api/auth/otp', json={'email': STUDENT_EMAIL})

    def test_valid_code_consumed(self, client: TestClient, mongo_db, sent_emails, monkeypatch):
        self.issue(client, monkeypatch)

        response = client.post('/api/auth/verify', json={'email': STUDENT_EMAIL, 'otp': '123456'})

        assert response.status_code == 200
        assert response.json()['success'] is True
        assert mongo_db['otp'].count_documents({}) == 0

        again = client.post('/api/auth/verify', json={'email': STUDENT_EMAIL, 'otp': '123456'})
        assert again.status_code == 400

    def test_wrong_code(self, client: TestClient, mongo_db, sent_emails, monkeypatch):
        self.issue(client, monkeypatch)

        response = client.post('/api/auth/verify', json={'email': STUDENT_EMAIL, 'otp': '000000'})

        assert response.status_code == 400
        assert response.json() == {'message': 'Invalid or expired OTP'}
        assert mongo_db['otp'].count_documents({}) == 1

    def test_expired_code(self, client: TestClient, mongo_db):
        past = datetime.now(timezone.utc) - timedelta(minutes=11)
        mongo_db['otp'].insert_one({
            'email': STUDENT_EMAIL,
            'otp': '654321',
            'createdAt': past,
            'expiresAt': past + timedelta(minutes=10),
        })

        response = client.post('/api/auth/verify', json={'email': STUDENT_EMAIL, 'otp': '654321'})
        assert response.status_code == 400

    def test_missing_fields(self, client: TestClient):
        response = client.post('/api/auth/verify', json={})
        assert response.status_code == 400
