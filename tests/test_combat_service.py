"""Unit tests for bullets, contact damage and zone damage."""

import pytest

from config.settings import PARTICLE_GRAVITY
from models.entities import Bot, Bullet, Obstacle, Particle, SafeZone, Zombie
from models.events import ServerEvent
from services.combat_service import CombatService, apply_damage
from services.spawner import Spawner

from conftest import add_player, make_room

NOW = 50_000.0


@pytest.fixture
def combat(rng):
    return CombatService(Spawner(rng), rng)


def make_bullet(owner="p1", x=500.0, y=500.0, created_at=NOW, damage=15):
    return Bullet(
        id="bullet-1", x=x, y=y, vx=0, vy=0, life=90,
        damage=damage, ownerId=owner, createdAt=created_at,
    )


def make_zombie(x=500.0, y=500.0, health=50.0):
    return Zombie(id="zombie-1", x=x, y=y, speed=1, health=health, maxHealth=health, color="#0f0")


@pytest.mark.unit
class TestApplyDamage:
    def test_health_never_goes_negative(self):
        zombie = make_zombie(health=5)
        assert apply_damage(zombie, 20)
        assert zombie.health == 0

    def test_only_the_killing_blow_is_lethal(self):
        zombie = make_zombie(health=5)
        assert not apply_damage(zombie, 2)
        assert apply_damage(zombie, 3)
        assert not apply_damage(zombie, 3)


@pytest.mark.unit
class TestBullets:
    def test_owner_is_never_hit(self, combat):
        room = make_room()
        shooter = add_player(room, "p1", x=495, y=495)
        room.bullets = [make_bullet(owner="p1")]
        events = []

        combat.update_bullets(room, NOW, events)

        assert shooter.health == 100
        assert len(room.bullets) == 1

    def test_bullet_damages_other_player(self, combat):
        room = make_room()
        target = add_player(room, "p2", x=495, y=495)
        room.bullets = [make_bullet(owner="p1")]

        combat.update_bullets(room, NOW, [])

        assert target.health == 85
        assert room.bullets == []
        assert room.particles

    def test_obstacle_absorbs_before_zombie(self, combat):
        room = make_room()
        obstacle = Obstacle(id="o", x=490, y=490, width=30, height=30)
        zombie = make_zombie(x=495, y=495)
        room.obstacles = [obstacle]
        room.zombies = [zombie]
        room.bullets = [make_bullet()]

        combat.update_bullets(room, NOW, [])

        assert obstacle.health == 135
        assert zombie.health == 50

    def test_destroyed_obstacle_is_removed(self, combat):
        room = make_room()
        room.obstacles = [Obstacle(id="o", x=490, y=490, width=30, height=30, health=10)]
        room.bullets = [make_bullet()]
        combat.update_bullets(room, NOW, [])
        assert room.obstacles == []

    def test_zombie_kill_scores(self, combat):
        room = make_room()
        room.zombies = [make_zombie(x=495, y=495, health=10)]
        room.bullets = [make_bullet()]

        combat.update_bullets(room, NOW, [])

        assert room.zombies == []
        assert room.score == 10

    def test_bot_killed_by_bullet_does_not_rise(self, combat):
        room = make_room()
        bot = Bot(id="bot-1", name="Soldier 1", x=495, y=495, speed=2, health=5)
        room.bots = [bot]
        room.bullets = [make_bullet()]

        combat.update_bullets(room, NOW, [])

        assert not bot.alive
        assert room.bots == []
        assert room.zombies == []
        assert room.score == 0

    def test_old_bullets_expire(self, combat):
        room = make_room()
        room.bullets = [make_bullet(created_at=NOW - 1600)]
        combat.update_bullets(room, NOW, [])
        assert room.bullets == []

    def test_bullets_leaving_the_world_expire(self, combat):
        room = make_room()
        bullet = make_bullet(x=2, y=300)
        bullet.vx = -10
        room.bullets = [bullet]
        combat.update_bullets(room, NOW, [])
        assert room.bullets == []

    def test_fire_bullet_from_center(self, combat):
        room = make_room()
        shooter = add_player(room, "p1", x=100, y=100)
        bullet = combat.fire_bullet(room, shooter, 210, 110, 10, 90, 15, NOW)
        assert (bullet.x, bullet.y) == (110, 110)
        assert bullet.vx == pytest.approx(10)
        assert bullet.vy == pytest.approx(0)
        assert bullet.ownerId == "p1"
        assert room.bullets == [bullet]


@pytest.mark.unit
class TestContactDamage:
    def test_zombie_hurts_player_and_reports_death(self, combat):
        room = make_room()
        player = add_player(room, "p1", x=500, y=500)
        player.health = 1
        zombie = make_zombie(x=505, y=505)
        events = []

        combat.resolve_zombie_contact(room, zombie, events)

        assert player.health == 0
        assert not player.alive
        assert events == [(ServerEvent.PLAYER_DIED, {"playerId": "p1"})]

    def test_bot_killed_by_zombie_becomes_super_zombie(self, combat):
        room = make_room(difficulty="medium")
        bot = Bot(id="bot-1", name="Soldier 1", x=500, y=500, speed=2, health=1)
        room.bots = [bot]
        zombie = make_zombie(x=505, y=505)
        room.zombies = [zombie]

        combat.resolve_zombie_contact(room, zombie, [])

        assert not bot.alive
        risen = room.zombies[-1]
        assert risen.isSuper
        assert risen.health == 400
        assert (risen.x, risen.y) == (500, 500)
        assert room.score == 5

    def test_bot_melee_uses_first_overlapping_zombie(self, combat):
        room = make_room()
        bot = Bot(id="bot-1", name="Soldier 1", x=500, y=500, speed=2)
        room.zombies = [make_zombie(x=505, y=505), make_zombie(x=506, y=506)]

        combat.resolve_bot_melee(room, bot)

        assert bot.health == 90


@pytest.mark.unit
class TestZoneAndParticles:
    def test_zone_damages_everyone_outside(self, combat):
        room = make_room()
        room.safe_zone = SafeZone(radius=100)
        outside = add_player(room, "p1", x=10, y=10)
        inside = add_player(room, "p2", x=790, y=590)
        zombie = make_zombie(x=10, y=1000)
        room.zombies = [zombie]

        combat.apply_zone_damage(room, [])

        assert outside.health == pytest.approx(100 - 2 / 60)
        assert inside.health == 100
        assert zombie.health == pytest.approx(50 - 2 / 60)

    def test_zone_kill_removes_bot_and_reports_player(self, combat):
        room = make_room()
        room.safe_zone = SafeZone(radius=100)
        player = add_player(room, "p1", x=10, y=10)
        player.health = 0.01
        room.bots = [Bot(id="bot-1", name="Soldier 1", x=10, y=10, speed=2, health=0.01)]
        events = []

        combat.apply_zone_damage(room, events)

        assert player.health == 0 and not player.alive
        assert room.bots == []
        assert events == [(ServerEvent.PLAYER_DIED, {"playerId": "p1"})]

    def test_particles_fall_and_expire(self, combat):
        room = make_room()
        room.particles = [
            Particle(x=0, y=0, vx=1, vy=0, life=2, size=3, color="#fff"),
            Particle(x=0, y=0, vx=0, vy=0, life=1, size=3, color="#fff"),
        ]
        combat.update_particles(room)
        assert len(room.particles) == 1
        assert room.particles[0].x == 1
        assert room.particles[0].vy == pytest.approx(PARTICLE_GRAVITY)

    def test_explosion_size(self, combat):
        room = make_room()
        combat.create_explosion(room, 10, 10, "#ff0000")
        assert len(room.particles) == 12
