"""Built-in framework profiles and profile resolution.

A profile is a named list of entrypoints, in the same shape users write in
their config file::

    {"name": "...", "keepExternalOverrides": true,
     "entrypoints": [{"name": "...", "rules": [{"annotatedBy": "..."}]}]}

Built-in profiles are declared in that shape too and compiled on demand,
so user and built-in profiles go through one code path.
"""

from __future__ import annotations

import logging

from langtools.rules.conditions import (
    Entrypoint,
    ProfileError,
    ResolvedRules,
    compile_entrypoint,
)

log = logging.getLogger(__name__)


def _annotated(name: str, fqn: str) -> dict:
    return {"name": name, "rules": [{"annotatedBy": fqn}]}


def _named(name: str, pattern: str) -> dict:
    return {"name": name, "rules": [{"namePattern": pattern}]}


_SPRING = "org.springframework"
_SPRING_WEB = "org.springframework.web.bind.annotation"

_SPRING_PROFILE = {
    "name": "spring",
    "entrypoints": [
        # Stereotype beans count only when they also plug into the framework.
        {
            "name": "Spring component (infrastructure bean)",
            "rules": [
                {"annotatedBy": f"{_SPRING}.stereotype.Component"},
                {"implementsInterfaceFromPackage": f"{_SPRING}.*"},
            ],
        },
        {
            "name": "Spring service bean",
            "rules": [
                {"annotatedBy": f"{_SPRING}.stereotype.Service"},
                {"implementsInterfaceFromPackage": f"{_SPRING}.*"},
            ],
        },
        _annotated("Spring configuration class", f"{_SPRING}.context.annotation.Configuration"),
        _annotated("Spring bean producer method", f"{_SPRING}.context.annotation.Bean"),
        _annotated("Spring web controller", f"{_SPRING}.stereotype.Controller"),
        _annotated("Spring REST controller", f"{_SPRING_WEB}.RestController"),
        _annotated("Spring request mapping", f"{_SPRING_WEB}.RequestMapping"),
        _annotated("Spring GET mapping", f"{_SPRING_WEB}.GetMapping"),
        _annotated("Spring POST mapping", f"{_SPRING_WEB}.PostMapping"),
        _annotated("Spring PUT mapping", f"{_SPRING_WEB}.PutMapping"),
        _annotated("Spring DELETE mapping", f"{_SPRING_WEB}.DeleteMapping"),
        _annotated("Spring PATCH mapping", f"{_SPRING_WEB}.PatchMapping"),
        _annotated("Spring scheduled method", f"{_SPRING}.scheduling.annotation.Scheduled"),
        _annotated("Spring event listener", f"{_SPRING}.context.event.EventListener"),
        _annotated("Spring injection point", f"{_SPRING}.beans.factory.annotation.Autowired"),
        _annotated("Spring value injection", f"{_SPRING}.beans.factory.annotation.Value"),
        _annotated("Spring config properties", f"{_SPRING}.boot.context.properties.ConfigurationProperties"),
    ],
}

_JUNIT_ANNOTATIONS = [
    ("Test", "org.junit.jupiter.api.Test"),
    ("BeforeEach", "org.junit.jupiter.api.BeforeEach"),
    ("AfterEach", "org.junit.jupiter.api.AfterEach"),
    ("BeforeAll", "org.junit.jupiter.api.BeforeAll"),
    ("AfterAll", "org.junit.jupiter.api.AfterAll"),
    ("ParameterizedTest", "org.junit.jupiter.params.ParameterizedTest"),
    ("Suite", "org.junit.platform.suite.api.Suite"),
    ("Nested", "org.junit.jupiter.api.Nested"),
    ("TestFactory", "org.junit.jupiter.api.TestFactory"),
    ("RepeatedTest", "org.junit.jupiter.api.RepeatedTest"),
    ("ExtendWith", "org.junit.jupiter.api.extension.ExtendWith"),
    ("Tag", "org.junit.jupiter.api.Tag"),
]

_JUNIT5_PROFILE = {
    "name": "junit5",
    "entrypoints": [_annotated(f"JUnit5 @{short}", fqn) for short, fqn in _JUNIT_ANNOTATIONS],
}

# Lifecycle callbacks invoked by the Android framework.
_ANDROID_CALLBACKS = [
    "onCreate", "onStart", "onResume", "onPause", "onStop", "onDestroy",
    "onCreateView", "onViewCreated", "onAttach", "onDetach",
    "onReceive", "onBind", "onUnbind", "onRebind",
    "onSaveInstanceState", "onRestoreInstanceState", "onActivityResult",
    "onOptionsItemSelected", "onCreateOptionsMenu",
    "onRequestPermissionsResult", "onBackPressed",
]

_ANDROID_PROFILE = {
    "name": "android",
    "entrypoints": [_named(f"Android {cb}", cb) for cb in _ANDROID_CALLBACKS],
}

_MICRONAUT_HTTP = "io.micronaut.http.annotation"

_MICRONAUT_PROFILE = {
    "name": "micronaut",
    "entrypoints": [
        _annotated("Micronaut singleton bean", "jakarta.inject.Singleton"),
        _annotated("Micronaut injection point", "jakarta.inject.Inject"),
        _annotated("Micronaut HTTP controller", f"{_MICRONAUT_HTTP}.Controller"),
        _annotated("Micronaut GET endpoint", f"{_MICRONAUT_HTTP}.Get"),
        _annotated("Micronaut POST endpoint", f"{_MICRONAUT_HTTP}.Post"),
        _annotated("Micronaut PUT endpoint", f"{_MICRONAUT_HTTP}.Put"),
        _annotated("Micronaut DELETE endpoint", f"{_MICRONAUT_HTTP}.Delete"),
        _annotated("Micronaut PATCH endpoint", f"{_MICRONAUT_HTTP}.Patch"),
        _annotated("Micronaut OPTIONS endpoint", f"{_MICRONAUT_HTTP}.Options"),
        _annotated("Micronaut HEAD endpoint", f"{_MICRONAUT_HTTP}.Head"),
        _annotated("Micronaut HTTP filter", f"{_MICRONAUT_HTTP}.Filter"),
        _annotated("Micronaut declarative HTTP client", "io.micronaut.http.client.annotation.Client"),
        _annotated("Micronaut factory class", "io.micronaut.context.annotation.Factory"),
        _annotated("Micronaut bean producer method", "io.micronaut.context.annotation.Bean"),
        _annotated("Micronaut configuration properties", "io.micronaut.context.annotation.ConfigurationProperties"),
        _annotated("Micronaut scheduled task", "io.micronaut.scheduling.annotation.Scheduled"),
        _annotated("Micronaut event listener", "io.micronaut.runtime.event.annotation.EventListener"),
        _annotated("Micronaut WebSocket server", "io.micronaut.websocket.annotation.ServerWebSocket"),
        _annotated("Micronaut WebSocket client", "io.micronaut.websocket.annotation.ClientWebSocket"),
    ],
}

_JAKARTA_PROFILE = {
    "name": "jakarta",
    "entrypoints": [
        _annotated("Jakarta Singleton bean", "jakarta.inject.Singleton"),
        _annotated("Jakarta injection point", "jakarta.inject.Inject"),
        _annotated("Jakarta CDI ApplicationScoped", "jakarta.enterprise.context.ApplicationScoped"),
        _annotated("Jakarta CDI RequestScoped", "jakarta.enterprise.context.RequestScoped"),
        _annotated("Jakarta CDI SessionScoped", "jakarta.enterprise.context.SessionScoped"),
        _annotated("Jakarta CDI Dependent", "jakarta.enterprise.context.Dependent"),
        _annotated("Jakarta CDI producer", "jakarta.enterprise.inject.Produces"),
        _annotated("JAX-RS resource class or method", "jakarta.ws.rs.Path"),
        _annotated("JAX-RS GET method", "jakarta.ws.rs.GET"),
        _annotated("JAX-RS POST method", "jakarta.ws.rs.POST"),
        _annotated("JAX-RS PUT method", "jakarta.ws.rs.PUT"),
        _annotated("JAX-RS DELETE method", "jakarta.ws.rs.DELETE"),
        _annotated("EJB Stateless session bean", "jakarta.ejb.Stateless"),
        _annotated("EJB Stateful session bean", "jakarta.ejb.Stateful"),
        _annotated("EJB Singleton session bean", "jakarta.ejb.Singleton"),
        _annotated("EJB scheduled method", "jakarta.ejb.Schedule"),
        _annotated("JPA entity class", "jakarta.persistence.Entity"),
        _annotated("Jakarta PostConstruct callback", "jakarta.annotation.PostConstruct"),
        _annotated("Jakarta PreDestroy callback", "jakarta.annotation.PreDestroy"),
    ],
}

BUILTIN_PROFILES: dict[str, dict] = {
    p["name"]: p
    for p in (_SPRING_PROFILE, _JUNIT5_PROFILE, _ANDROID_PROFILE, _MICRONAUT_PROFILE, _JAKARTA_PROFILE)
}


def _user_profiles(config: dict) -> dict[str, dict]:
    profiles = {}
    for profile in config.get("profiles") or []:
        if isinstance(profile, dict) and profile.get("name"):
            profiles[profile["name"]] = profile
    return profiles


def resolve_profiles(names, config: dict | None = None) -> ResolvedRules:
    """Compile the active profile *names* into one :class:`ResolvedRules`.

    Entrypoints of all profiles are OR-ed together. Built-in profiles win
    over user profiles of the same name. Raises :class:`ProfileError` for
    an unknown name or a malformed entrypoint, before any file is read.
    """
    config = config or {}
    if not names:
        return ResolvedRules()

    user = _user_profiles(config)
    entrypoints: list[Entrypoint] = []
    trust = True
    for name in names:
        profile = BUILTIN_PROFILES.get(name) or user.get(name)
        if profile is None:
            available = ", ".join(BUILTIN_PROFILES)
            raise ProfileError(f'Unknown profile: "{name}". Available built-in profiles: {available}.')
        if profile.get("keepExternalOverrides") is False:
            trust = False
        for entry in profile.get("entrypoints") or []:
            entrypoints.append(compile_entrypoint(entry, name))

    log.debug("Resolved %d entrypoints from profiles %s", len(entrypoints), list(names))
    return ResolvedRules(entrypoints=tuple(entrypoints), trust_external_overrides=trust)


def list_profiles(config: dict | None = None) -> list[dict]:
    """Summaries of every built-in and user profile, built-ins first."""
    config = config or {}
    rows = []
    for name, profile in BUILTIN_PROFILES.items():
        rows.append({
            "name": name,
            "builtin": True,
            "entrypoints": len(profile["entrypoints"]),
            "keepExternalOverrides": profile.get("keepExternalOverrides", True),
        })
    for name, profile in _user_profiles(config).items():
        if name in BUILTIN_PROFILES:
            continue
        rows.append({
            "name": name,
            "builtin": False,
            "entrypoints": len(profile.get("entrypoints") or []),
            "keepExternalOverrides": profile.get("keepExternalOverrides", True) is not False,
        })
    return rows
