from __future__ import annotations

from typing import Any, Dict, Mapping

from memreport.errors import CommentPublishError

from pipeline.framework import ActionInput, JobContext, StepStore, input_flag, register_action
from tools.github.sticky import publish_sticky_comment


@register_action(
    "comment/sticky",
    description="Create or update the one pull-request comment identified by header",
    inputs=[
        ActionInput("header", default=""),
        ActionInput("message", default=""),
        ActionInput("number", default=""),
        ActionInput("append", default="false"),
        ActionInput("recreate", default="false"),
        ActionInput("delete", default="false"),
        ActionInput("only_create", default="false"),
        ActionInput("only_update", default="false"),
        ActionInput("skip_unchanged", default="false"),
    ],
)
def sticky_comment(ctx: JobContext, store: StepStore, inputs: Mapping[str, str]) -> Dict[str, Any]:
    if not ctx.job.has_permission("pull-requests", "write"):
        raise CommentPublishError(
            f"Job '{ctx.job.key}' lacks permission pull-requests: write; refusing to publish a comment"
        )

    raw_number = inputs.get("number", "").strip()
    pr_number = int(raw_number) if raw_number else ctx.event.pr_number
    if pr_number is None:
        raise CommentPublishError(f"No pull request number for event '{ctx.event.event_name}'")

    backend = ctx.services.comments(ctx.event)
    res = publish_sticky_comment(
        backend,
        pr_number,
        header=inputs.get("header", ""),
        message=inputs.get("message", ""),
        append=input_flag(inputs.get("append")),
        recreate=input_flag(inputs.get("recreate")),
        delete=input_flag(inputs.get("delete")),
        only_create=input_flag(inputs.get("only_create")),
        only_update=input_flag(inputs.get("only_update")),
        skip_unchanged=input_flag(inputs.get("skip_unchanged")),
    )
    print(f"  sticky comment '{inputs.get('header', '')}' on PR #{pr_number}: {res.action}")
    return {
        "previous_comment_id": res.previous_comment_id or "",
        "created_comment_id": res.created_comment_id or "",
    }
