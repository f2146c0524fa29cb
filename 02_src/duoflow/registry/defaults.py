"""Default agent roster and sample code under analysis."""

from ..models import Agent, AgentRole, TriggerType

DEFAULT_AGENTS: tuple[Agent, ...] = (
    Agent(
        id="sec-guard",
        name="SecGuard-V2",
        role=AgentRole.SECURITY,
        description=(
            "Detects OWASP Top 10 risks including SQL injection, broken access "
            "control and SSRF, plus hardcoded secrets and weak cryptography."
        ),
        subscriptions=frozenset({TriggerType.CODE_SUBMITTED}),
    ),
    Agent(
        id="code-scanner",
        name="CodeScanner",
        role=AgentRole.SECURITY,
        description=(
            "Looks for lower-level flaws such as memory safety violations and "
            "race conditions. Also runs deep diagnostics on build failures."
        ),
        subscriptions=frozenset(
            {TriggerType.VULNERABILITY_DETECTED, TriggerType.BUILD_FAILED}
        ),
    ),
    Agent(
        id="code-critic",
        name="CodeCritic",
        role=AgentRole.REVIEWER,
        description=(
            "Evaluates cognitive and cyclomatic complexity, style guide "
            "adherence and architectural smells."
        ),
        subscriptions=frozenset({TriggerType.CODE_SUBMITTED}),
    ),
    Agent(
        id="perf-optima",
        name="PerfOptima-X",
        role=AgentRole.PERFORMANCE,
        description=(
            "Audits algorithmic efficiency: N+1 queries, blocking work on hot "
            "paths and leaky closures."
        ),
        subscriptions=frozenset({TriggerType.CODE_SUBMITTED}),
    ),
    Agent(
        id="risk-analyzer",
        name="RiskAnalyzer",
        role=AgentRole.PERFORMANCE,
        description=(
            "Estimates reliability impact on critical paths: fragile error "
            "handling, unhandled rejections and cascading failures."
        ),
        subscriptions=frozenset({TriggerType.INEFFICIENCY_DETECTED}),
    ),
    Agent(
        id="schema-guardian",
        name="SchemaGuardian",
        role=AgentRole.COMPLIANCE,
        description=(
            "Validates OpenAPI and GraphQL contracts for breaking changes, "
            "mismatched types and missing mandatory fields."
        ),
        subscriptions=frozenset({TriggerType.SCHEMA_MISMATCH}),
    ),
    Agent(
        id="refactor-engine",
        name="AutoRefactor",
        role=AgentRole.REFACTOR,
        description=(
            "Turns security and performance findings into verified patches."
        ),
        subscriptions=frozenset(
            {
                TriggerType.VULNERABILITY_DETECTED,
                TriggerType.INEFFICIENCY_DETECTED,
                TriggerType.SCHEMA_MISMATCH,
            }
        ),
    ),
    Agent(
        id="code-refactorer",
        name="CodeRefactorer",
        role=AgentRole.REFACTOR,
        description=(
            "Architectural modernization once code is pre-validated for "
            "refactoring."
        ),
        subscriptions=frozenset({TriggerType.REFACTOR_READY}),
    ),
    Agent(
        id="cicd-integrator",
        name="CICDIntegrator",
        role=AgentRole.INTEGRATION,
        description=(
            "Pipeline orchestrator watching builds and deployments; triggers "
            "diagnostics on build failure."
        ),
        subscriptions=frozenset(
            {
                TriggerType.CODE_SUBMITTED,
                TriggerType.REFACTOR_COMPLETE,
                TriggerType.BUILD_FAILED,
                TriggerType.DEPLOYMENT_STARTED,
            }
        ),
    ),
    Agent(
        id="compliance-bot",
        name="AuditPro",
        role=AgentRole.COMPLIANCE,
        description=(
            "GDPR, HIPAA and SOC2 specialist: PII masking, encryption at rest "
            "and audit-trail logging."
        ),
        subscriptions=frozenset({TriggerType.REFACTOR_COMPLETE}),
    ),
    Agent(
        id="compliance-master",
        name="ComplianceMaster",
        role=AgentRole.COMPLIANCE,
        description=(
            "Checks data handling, encryption and logging practices against "
            "industry regulations."
        ),
        subscriptions=frozenset(
            {TriggerType.CODE_SUBMITTED, TriggerType.REFACTOR_COMPLETE}
        ),
    ),
)


INITIAL_CODE_SAMPLE = """// Vulnerable Node.js / Express code example
const express = require('express');
const app = express();
const db = require('./database');

app.get('/user', (req, res) => {
  const query = "SELECT * FROM users WHERE id = '" + req.query.id + "'";
  db.query(query, (err, result) => {
    if (err) throw err;
    res.send(result);
  });
});

app.listen(3000);"""
