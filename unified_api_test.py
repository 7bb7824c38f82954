#!/usr/bin/env python3
"""
Smoke test for a running hospital records API.

Logs in with the accounts created by ``manage.py ensure_test_users`` and
calls the read endpoints each role is expected to reach, plus a few it
must be refused.  Exits non-zero when any call answers with an
unexpected status code.

    BASE_URL=http://127.0.0.1:3001 python unified_api_test.py
"""
import json
import os
import sys
import time
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, List, Optional

import requests

BASE_URL = os.getenv("BASE_URL", f"http://127.0.0.1:{os.getenv('PORT', '3001')}")
PASSWORD = os.getenv("TEST_PASSWORD", "123456")

TEST_USERS = {
    "admin": "admin1",
    "physician": "dr.jones",
    "patient": "patient1",
}

STAFF_READS = [
    "/api/doctors",
    "/api/patients",
    "/api/appointments",
    "/api/appointments/patients",
    "/api/appointments/doctors",
    "/api/conditions",
    "/api/medications",
    "/api/medications/options",
    "/api/patients-with-conditions",
    "/api/patient-conditions/patient-options",
    "/api/patient-conditions/options",
    "/api/patient-conditions/doctors/options",
    "/api/patient-medications",
    "/api/medical-history",
]

# (endpoint, expected status) per role, on top of the shared checks
ROLE_CHECKS: Dict[str, List[tuple]] = {
    "admin": [(e, 200) for e in STAFF_READS] + [
        ("/api/users", 200),
        ("/api/roles", 200),
        ("/api/admin/dashboard", 200),
    ],
    "physician": [(e, 200) for e in STAFF_READS] + [
        ("/api/users", 403),
        ("/api/admin/dashboard", 403),
    ],
    "patient": [
        ("/api/patients-with-conditions", 200),
        ("/api/patient-medications", 200),
        ("/api/doctors", 403),
        ("/api/medical-history", 403),
    ],
}


@dataclass
class TestResult:
    success: bool
    endpoint: str
    method: str
    status_code: int
    response_time: float
    error_message: str = ""
    user_role: str = ""


class UnifiedAPITester:
    def __init__(self):
        self.session = requests.Session()
        self.headers: Dict[str, str] = {}
        self.current_role: Optional[str] = None
        self.results: List[TestResult] = []

    @property
    def errors(self) -> List[TestResult]:
        return [r for r in self.results if not r.success]

    def login(self, role: str) -> Optional[dict]:
        username = TEST_USERS[role]
        r = self.call("POST", "/api/auth/login", {"username": username, "password": PASSWORD}, expected=200)
        if r is None or r.status_code != 200:
            print(f"❌ {username} login failed")
            return None
        data = r.json()
        self.headers = {"Authorization": f"Bearer {data['token']}"}
        self.current_role = role
        print(f"✅ {username} logged in as {data['user']['role']}")
        return data

    def call(self, method: str, endpoint: str, data: Optional[dict] = None, expected: int = 200):
        start = time.time()
        try:
            r = self.session.request(method, f"{BASE_URL}{endpoint}", json=data, headers=self.headers, timeout=10)
        except requests.RequestException as e:
            self.results.append(TestResult(False, endpoint, method, 0, 0.0, str(e), self.current_role or ""))
            return None
        ok = r.status_code == expected
        self.results.append(TestResult(
            success=ok,
            endpoint=endpoint,
            method=method,
            status_code=r.status_code,
            response_time=time.time() - start,
            error_message="" if ok else f"expected {expected}: {r.text[:200]}",
            user_role=self.current_role or "",
        ))
        print(f"{'✅' if ok else '❌'} {method} {endpoint} -> {r.status_code}")
        return r

    def run_role(self, role: str) -> None:
        self.headers = {}
        login = self.login(role)
        if login is None:
            return
        for endpoint, expected in ROLE_CHECKS[role]:
            self.call("GET", endpoint, expected=expected)
        if role == "patient":
            # the patient's own profile is reachable, its history is scoped to it
            profile = self.call("GET", f"/api/patients/by-user/{login['user']['id']}")
            if profile is not None and profile.status_code == 200:
                self.call("GET", f"/api/medical-history/patient/{profile.json()['id']}")
        self.call("POST", "/api/auth/logout", {"refresh": login["refresh"]})

    def run(self) -> bool:
        print(f"🚀 Smoke testing {BASE_URL}")
        self.call("GET", "/healthz")
        self.call("GET", "/api/auth/status")
        self.call("GET", "/api/conditions", expected=401)
        for role in TEST_USERS:
            self.run_role(role)
        self.write_report()
        return not self.errors

    def write_report(self) -> None:
        name = f"api_test_report_{datetime.now():%Y%m%d_%H%M%S}.json"
        with open(name, "w", encoding="utf-8") as fh:
            json.dump({
                "base_url": BASE_URL,
                "total": len(self.results),
                "failed": len(self.errors),
                "results": [asdict(r) for r in self.results],
            }, fh, ensure_ascii=False, indent=2)
        print(f"📄 Report written to {name}")


def main():
    tester = UnifiedAPITester()
    if tester.run():
        print("\n✅ All API checks passed")
        sys.exit(0)
    print(f"\n⚠️  {len(tester.errors)} API checks failed")
    sys.exit(1)


if __name__ == "__main__":
    main()
