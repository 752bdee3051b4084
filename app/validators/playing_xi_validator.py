MAX_PLAYING_XI = 11


class PlayingXIValidator:
    @staticmethod
    def validate(team_a_id: str, team_b_id: str, xi_a: list, xi_b: list, require_openers: bool = False) -> dict:
        """
        Validate the two playing XIs of a match.

        Rules:
        1. Two different teams
        2. At most 11 players per side, no duplicates
        3. No player on both sides
        4. At least 2 players per side once the match starts (require_openers)
        """
        errors = []

        if team_a_id == team_b_id:
            errors.append("A team cannot play itself")

        for label, xi in (("A", xi_a), ("B", xi_b)):
            if len(xi) > MAX_PLAYING_XI:
                errors.append(f"Playing XI {label} has {len(xi)} players, max {MAX_PLAYING_XI}")
            if len(set(xi)) != len(xi):
                errors.append(f"Playing XI {label} lists a player more than once")
            if require_openers and len(xi) < 2:
                errors.append(f"Playing XI {label} needs at least 2 players to bat")

        shared = set(xi_a) & set(xi_b)
        if shared:
            errors.append(f"Players on both sides: {', '.join(sorted(shared))}")

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "breakdown": {
                "team_a_players": len(xi_a),
                "team_b_players": len(xi_b),
            }
        }

    @staticmethod
    def validate_batting_order(order: list, xi: list) -> dict:
        """A Super Over batting order: openers first, all drawn from the batting XI"""
        errors = []

        if len(order) < 2:
            errors.append(f"Batting order needs at least 2 players, got {len(order)}")
        if len(set(order)) != len(order):
            errors.append("Batting order lists a player more than once")

        outsiders = [p for p in order if p not in xi]
        if outsiders:
            errors.append(f"Not in the playing XI: {', '.join(outsiders)}")

        return {"valid": len(errors) == 0, "errors": errors}
