"""Projects and environments endpoints."""
from eventinsight.models import Environment, Project

from conftest import make_session
from eventinsight.auth import SESSION_COOKIE_NAME


class TestProjects:
    def test_create_derives_slug_from_name(self, auth_client, user):
        response = auth_client.post("/api/projects", json={"name": "My Shop!"})

        assert response.status_code == 201
        body = response.json()
        assert body["slug"] == "my-shop"
        assert body["user_id"] == str(user.id)

    def test_derived_slug_is_made_unique(self, auth_client):
        auth_client.post("/api/projects", json={"name": "Blog"})
        response = auth_client.post("/api/projects", json={"name": "Blog"})

        assert response.status_code == 201
        assert response.json()["slug"] == "blog-1"

    def test_explicit_duplicate_slug_is_conflict(self, auth_client, project):
        response = auth_client.post("/api/projects", json={"name": "Other", "slug": project.slug})
        assert response.status_code == 409

    def test_invalid_slug_is_rejected(self, auth_client):
        response = auth_client.post("/api/projects", json={"name": "Other", "slug": "Not A Slug"})
        assert response.status_code == 400

    def test_same_slug_under_another_user_succeeds(self, client, db, project, other_user):
        client.cookies.set(SESSION_COOKIE_NAME, make_session(db, other_user))

        response = client.post("/api/projects", json={"name": "Mine", "slug": project.slug})

        assert response.status_code == 201
        assert db.query(Project).filter(Project.slug == project.slug).count() == 2

    def test_list_only_shows_own_projects(self, client, db, project, other_user):
        client.cookies.set(SESSION_COOKIE_NAME, make_session(db, other_user))
        assert client.get("/api/projects").json() == []

    def test_get_other_users_project_is_404(self, client, db, project, other_user):
        client.cookies.set(SESSION_COOKIE_NAME, make_session(db, other_user))
        assert client.get(f"/api/projects/{project.slug}").status_code == 404

    def test_rename_updates_slug(self, auth_client, project):
        response = auth_client.put(f"/api/projects/{project.slug}", json={"name": "Renamed Site"})

        assert response.status_code == 200
        assert response.json()["slug"] == "renamed-site"
        assert auth_client.get("/api/projects/renamed-site").status_code == 200

    def test_delete_cascades_to_environments(self, auth_client, db, project, environment):
        response = auth_client.delete(f"/api/projects/{project.slug}")

        assert response.status_code == 200
        db.expire_all()
        assert db.query(Project).count() == 0
        assert db.query(Environment).count() == 0


class TestEnvironments:
    def test_create_and_list(self, auth_client, project):
        response = auth_client.post(f"/api/projects/{project.slug}/environments", json={"name": "staging"})
        assert response.status_code == 201
        assert response.json()["project_id"] == str(project.id)

        names = [e["name"] for e in auth_client.get(f"/api/projects/{project.slug}/environments").json()]
        assert names == ["staging"]

    def test_duplicate_name_in_project_is_conflict(self, auth_client, project):
        url = f"/api/projects/{project.slug}/environments"
        assert auth_client.post(url, json={"name": "prod"}).status_code == 201
        assert auth_client.post(url, json={"name": "prod"}).status_code == 409

    def test_same_name_in_another_project_succeeds(self, auth_client, project):
        auth_client.post(f"/api/projects/{project.slug}/environments", json={"name": "prod"})
        other = auth_client.post("/api/projects", json={"name": "Second"}).json()

        response = auth_client.post(f"/api/projects/{other['slug']}/environments", json={"name": "prod"})
        assert response.status_code == 201

    def test_delete(self, auth_client, db, project, environment):
        response = auth_client.delete(f"/api/projects/{project.slug}/environments/{environment.name}")

        assert response.status_code == 200
        db.expire_all()
        assert db.query(Environment).count() == 0

    def test_delete_unknown_environment_is_404(self, auth_client, project):
        assert auth_client.delete(f"/api/projects/{project.slug}/environments/nope").status_code == 404

    def test_other_users_project_is_404(self, client, db, project, other_user):
        client.cookies.set(SESSION_COOKIE_NAME, make_session(db, other_user))
        response = client.post(f"/api/projects/{project.slug}/environments", json={"name": "prod"})
        assert response.status_code == 404
